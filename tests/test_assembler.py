import unittest
from dataclasses import replace

from toastnotify.assembler import assemble
from toastnotify.config import (
    ActionButton,
    Configuration,
    CustomAudio,
    DismissButton,
    Feature,
    SnoozeButton,
    TextFields,
)
from toastnotify.facts import EnvironmentFacts
from toastnotify.resolver import ResolvedScenario, ScenarioKind, resolve


def _config(*features: Feature, **overrides) -> Configuration:
    base = Configuration(
        features=frozenset(features),
        max_uptime_days=5,
        text=TextFields(
            attribution="Helpdesk",
            header="Reminder",
            title="Restart needed",
            body1="First",
            body2="Second",
        ),
    )
    return replace(base, **overrides)


class AssemblerTests(unittest.TestCase):
    def test_default_document_has_only_standard_blocks(self) -> None:
        config = _config()
        document = assemble(config, resolve(config, EnvironmentFacts()))
        self.assertEqual(document.scenario, "Default")
        self.assertEqual(document.attribution, "Helpdesk")
        self.assertEqual(document.header, "Reminder")
        self.assertEqual(
            [(block.kind, block.text) for block in document.blocks],
            [("title", "Restart needed"), ("body1", "First"), ("body2", "Second")],
        )
        self.assertEqual([action.kind for action in document.actions], ["action", "dismiss"])

    def test_actions_ordered_action_snooze_dismiss(self) -> None:
        config = _config(
            action_button=ActionButton(enabled=False, label="Restart", target="toast:restart"),
            dismiss_button=DismissButton(enabled=False),
            snooze_button=SnoozeButton(enabled=True),
        )
        document = assemble(config, resolve(config, EnvironmentFacts()))
        self.assertEqual([action.kind for action in document.actions], ["action", "snooze", "dismiss"])
        action = document.actions[0]
        self.assertEqual(action.label, "Restart")
        self.assertEqual(action.arguments, "toast:restart")
        snooze = document.actions[1]
        self.assertEqual([option.minutes for option in snooze.options], [15, 60, 240, 480])
        self.assertEqual(
            [option.label for option in snooze.options],
            ["15 minutes", "1 hour", "4 hours", "8 hours"],
        )

    def test_no_buttons_when_all_disabled(self) -> None:
        config = _config(
            action_button=ActionButton(enabled=False),
            dismiss_button=DismissButton(enabled=False),
        )
        document = assemble(config, resolve(config, EnvironmentFacts()))
        self.assertEqual(document.actions, ())

    def test_uptime_blocks_follow_body(self) -> None:
        config = _config(Feature.PENDING_REBOOT_UPTIME)
        document = assemble(config, resolve(config, EnvironmentFacts(uptime_days=10)))
        self.assertEqual(document.blocks[-1].text, "Computer uptime: 10 days")
        self.assertEqual([block.kind for block in document.blocks[:3]], ["title", "body1", "body2"])

    def test_assemble_is_idempotent(self) -> None:
        config = _config(Feature.PENDING_REBOOT_UPTIME, snooze_button=SnoozeButton(enabled=True))
        resolved = resolve(config, EnvironmentFacts(uptime_days=10))
        first = assemble(config, resolved)
        second = assemble(config, resolved)
        self.assertEqual(first, second)
        self.assertEqual(first.to_json(), second.to_json())

    def test_custom_audio_silences_toast(self) -> None:
        config = _config(custom_audio=CustomAudio(enabled=True, speech_text="Hello"))
        document = assemble(config, resolve(config, EnvironmentFacts()))
        self.assertTrue(document.audio_silent)

    def test_non_firing_scenario_rejected(self) -> None:
        with self.assertRaises(ValueError):
            assemble(_config(), ResolvedScenario(should_fire=False, scenario_kind=ScenarioKind.NONE))
