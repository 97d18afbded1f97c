from __future__ import annotations

from enum import Enum
from itertools import combinations

from .config import Configuration, DeadlinePriority, Feature, REBOOT_FEATURES


class ConfigErrorKind(str, Enum):
    DISABLED = "Disabled"
    CONFLICTING_FEATURES = "ConflictingFeatures"
    ZERO_OR_BOTH_PRESENTERS = "ZeroOrBothPresenters"
    CONFLICTING_TEXT_OPTION = "ConflictingTextOption"
    MISMATCHED_TEXT_OPTION = "MismatchedTextOption"
    MISSING_THRESHOLD = "MissingThreshold"


class ConfigError(Exception):
    def __init__(self, kind: ConfigErrorKind, message: str, conflict: tuple[str, str] | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.conflict = conflict


def validate(config: Configuration) -> Configuration:
    """Return the configuration unchanged or raise ConfigError for the first violated rule.

    Rules run in a fixed order: master toggle, feature exclusion, presenter
    identity, the pending-reboot text options, then required thresholds.
    """
    if not config.toast_enabled:
        raise ConfigError(ConfigErrorKind.DISABLED, "Toast is disabled in the configuration")

    exclusive = list(REBOOT_FEATURES)
    if config.recent_deadline_priority is DeadlinePriority.EXCLUSIVE:
        exclusive.append(Feature.RECENT_DEADLINE_CHECK)
    for first, second in combinations(exclusive, 2):
        if config.has(first) and config.has(second):
            raise ConfigError(
                ConfigErrorKind.CONFLICTING_FEATURES,
                f"{first.value} and {second.value} cannot both be enabled",
                conflict=(first.value, second.value),
            )

    if config.use_software_center == config.use_powershell:
        raise ConfigError(
            ConfigErrorKind.ZERO_OR_BOTH_PRESENTERS,
            "Exactly one of SoftwareCenter and PowerShellHost must be selected",
            conflict=("SoftwareCenter", "PowerShellHost"),
        )

    uptime_text = config.pending_reboot_uptime_text.enabled
    check_text = config.pending_reboot_check_text.enabled

    if config.has(Feature.UPGRADE_OS) and (uptime_text or check_text):
        text_option = "PendingRebootUptimeText" if uptime_text else "PendingRebootCheckText"
        raise ConfigError(
            ConfigErrorKind.CONFLICTING_TEXT_OPTION,
            f"UpgradeOS cannot be combined with {text_option}",
            conflict=(Feature.UPGRADE_OS.value, text_option),
        )

    if uptime_text and check_text:
        raise ConfigError(
            ConfigErrorKind.CONFLICTING_TEXT_OPTION,
            "PendingRebootUptimeText and PendingRebootCheckText cannot both be enabled",
            conflict=("PendingRebootUptimeText", "PendingRebootCheckText"),
        )

    if config.has(Feature.PENDING_REBOOT_CHECK) and uptime_text:
        raise ConfigError(
            ConfigErrorKind.MISMATCHED_TEXT_OPTION,
            "PendingRebootUptimeText requires PendingRebootUptime, not PendingRebootCheck",
            conflict=(Feature.PENDING_REBOOT_CHECK.value, "PendingRebootUptimeText"),
        )
    if config.has(Feature.PENDING_REBOOT_UPTIME) and check_text:
        raise ConfigError(
            ConfigErrorKind.MISMATCHED_TEXT_OPTION,
            "PendingRebootCheckText requires PendingRebootCheck, not PendingRebootUptime",
            conflict=(Feature.PENDING_REBOOT_UPTIME.value, "PendingRebootCheckText"),
        )

    if config.has(Feature.UPGRADE_OS) and config.target_build_number is None:
        raise ConfigError(ConfigErrorKind.MISSING_THRESHOLD, "UpgradeOS requires options.target_build")
    if config.has(Feature.PENDING_REBOOT_UPTIME) and config.max_uptime_days is None:
        raise ConfigError(
            ConfigErrorKind.MISSING_THRESHOLD, "PendingRebootUptime requires options.max_uptime_days"
        )
    if config.deadline.enabled and config.deadline.value is None:
        raise ConfigError(ConfigErrorKind.MISSING_THRESHOLD, "Deadline requires options.deadline.value")

    return config
