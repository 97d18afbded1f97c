from __future__ import annotations

from dataclasses import asdict, dataclass
import json
from typing import Any

from .config import Configuration, SnoozeOption
from .resolver import ResolvedScenario, TextBlock


@dataclass(frozen=True)
class NotificationAction:
    kind: str
    label: str
    arguments: str
    activation_type: str
    options: tuple[SnoozeOption, ...] = ()
    prompt: str | None = None


@dataclass(frozen=True)
class NotificationDocument:
    scenario: str
    scenario_style: str
    attribution: str
    header: str
    blocks: tuple[TextBlock, ...]
    actions: tuple[NotificationAction, ...]
    logo_image: str | None = None
    hero_image: str | None = None
    audio_silent: bool = False

    @property
    def title(self) -> str:
        return self.blocks[0].text if self.blocks else ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)


def assemble(config: Configuration, resolved: ResolvedScenario) -> NotificationDocument:
    if not resolved.should_fire:
        raise ValueError("Cannot assemble a notification for a scenario that does not fire")

    text = config.text
    blocks = (
        TextBlock(kind="title", text=text.title),
        TextBlock(kind="body1", text=text.body1),
        TextBlock(kind="body2", text=text.body2),
    ) + resolved.extra_blocks

    return NotificationDocument(
        scenario=resolved.scenario_kind.value,
        scenario_style=config.scenario_style.value,
        attribution=text.attribution,
        header=text.header,
        blocks=blocks,
        actions=_build_actions(config, resolved),
        logo_image=config.logo_image,
        hero_image=config.hero_image,
        audio_silent=config.custom_audio.enabled,
    )


def _build_actions(config: Configuration, resolved: ResolvedScenario) -> tuple[NotificationAction, ...]:
    actions: list[NotificationAction] = []
    if resolved.include_action_button:
        actions.append(
            NotificationAction(
                kind="action",
                label=config.action_button.label,
                arguments=config.action_button.target,
                activation_type="protocol",
            )
        )
    if resolved.include_snooze_button:
        actions.append(
            NotificationAction(
                kind="snooze",
                label=config.snooze_button.label,
                arguments="snooze",
                activation_type="system",
                options=config.snooze_button.durations,
                prompt=config.snooze_button.prompt,
            )
        )
    if resolved.include_dismiss_button:
        actions.append(
            NotificationAction(
                kind="dismiss",
                label=config.dismiss_button.label,
                arguments="dismiss",
                activation_type="system",
            )
        )
    return tuple(actions)
