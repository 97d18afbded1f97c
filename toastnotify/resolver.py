from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .config import Configuration, DeadlinePriority, Feature, REBOOT_FEATURES
from .facts import EnvironmentFacts


DEADLINE_FORMAT = "%d. %B %Y %H:%M"


class ScenarioKind(str, Enum):
    UPGRADE_OS = "UpgradeOS"
    PENDING_REBOOT_UPTIME = "PendingRebootUptime"
    PENDING_REBOOT_REGISTRY = "PendingRebootRegistry"
    PENDING_REBOOT_WMI = "PendingRebootWMI"
    RECENT_DEADLINE = "RecentDeadline"
    DEFAULT = "Default"
    NONE = "None"


@dataclass(frozen=True)
class TextBlock:
    kind: str
    text: str
    heading: str | None = None


@dataclass(frozen=True)
class ResolvedScenario:
    should_fire: bool
    scenario_kind: ScenarioKind
    include_action_button: bool = False
    include_dismiss_button: bool = False
    include_snooze_button: bool = False
    extra_blocks: tuple[TextBlock, ...] = ()
    reason: str = ""


def resolve(config: Configuration, facts: EnvironmentFacts) -> ResolvedScenario:
    """Pick the single scenario to show, or a non-firing result.

    Clauses are tried in priority order and the first match wins. A
    non-firing result is a normal outcome.
    """
    kind, reason = _select_scenario(config, facts)
    if kind is ScenarioKind.NONE:
        return ResolvedScenario(should_fire=False, scenario_kind=kind, reason=reason)

    snooze = config.snooze_button.enabled
    return ResolvedScenario(
        should_fire=True,
        scenario_kind=kind,
        include_action_button=config.action_button.enabled or snooze,
        include_dismiss_button=config.dismiss_button.enabled or snooze,
        include_snooze_button=snooze,
        extra_blocks=_extra_blocks(config, facts, kind),
        reason=reason,
    )


def _select_scenario(config: Configuration, facts: EnvironmentFacts) -> tuple[ScenarioKind, str]:
    if config.has(Feature.UPGRADE_OS):
        if facts.running_build_number < config.target_build_number:
            return (
                ScenarioKind.UPGRADE_OS,
                f"build {facts.running_build_number} is below target {config.target_build_number}",
            )
        return (
            ScenarioKind.NONE,
            f"build {facts.running_build_number} already meets target {config.target_build_number}",
        )

    if config.has(Feature.PENDING_REBOOT_UPTIME) and facts.uptime_days > config.max_uptime_days:
        return (
            ScenarioKind.PENDING_REBOOT_UPTIME,
            f"uptime {facts.uptime_days} days exceeds {config.max_uptime_days}",
        )

    if config.has(Feature.PENDING_REBOOT_CHECK):
        if facts.registry_reboot_pending:
            return ScenarioKind.PENDING_REBOOT_REGISTRY, "registry reports a pending reboot"
        if facts.service_reboot_pending:
            return ScenarioKind.PENDING_REBOOT_WMI, "management agent reports a pending reboot"

    exclusive = config.recent_deadline_priority is DeadlinePriority.EXCLUSIVE
    if exclusive and _recent_deadline(config, facts):
        return ScenarioKind.RECENT_DEADLINE, _deadline_reason(facts)

    gating = list(REBOOT_FEATURES)
    if exclusive:
        gating.append(Feature.RECENT_DEADLINE_CHECK)
    if not any(config.has(feature) for feature in gating):
        return ScenarioKind.DEFAULT, "no gating feature enabled"

    if not exclusive and _recent_deadline(config, facts):
        return ScenarioKind.RECENT_DEADLINE, _deadline_reason(facts)

    return ScenarioKind.NONE, "no enabled check triggered"


def _recent_deadline(config: Configuration, facts: EnvironmentFacts) -> bool:
    return config.has(Feature.RECENT_DEADLINE_CHECK) and facts.recent_or_upcoming_deadline_count > 0


def _deadline_reason(facts: EnvironmentFacts) -> str:
    return f"{facts.recent_or_upcoming_deadline_count} update deadline(s) within 24 hours"


def _extra_blocks(config: Configuration, facts: EnvironmentFacts, kind: ScenarioKind) -> tuple[TextBlock, ...]:
    blocks: list[TextBlock] = []

    if config.deadline.enabled and config.deadline.value is not None:
        blocks.append(
            TextBlock(
                kind="deadline",
                heading=config.deadline.label,
                text=format_deadline(config.deadline.value),
            )
        )

    if kind is ScenarioKind.PENDING_REBOOT_UPTIME:
        if config.pending_reboot_uptime_text.enabled:
            blocks.append(TextBlock(kind="reboot_reason", text=config.pending_reboot_uptime_text.value))
        blocks.append(TextBlock(kind="uptime", text=f"Computer uptime: {facts.uptime_days} days"))
    elif kind in (ScenarioKind.PENDING_REBOOT_REGISTRY, ScenarioKind.PENDING_REBOOT_WMI):
        if config.pending_reboot_check_text.enabled:
            blocks.append(TextBlock(kind="reboot_reason", text=config.pending_reboot_check_text.value))

    return tuple(blocks)


def format_deadline(value) -> str:
    return value.strftime(DEADLINE_FORMAT)
