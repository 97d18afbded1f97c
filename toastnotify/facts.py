from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Protocol, runtime_checkable

from .config import Configuration, Feature


@dataclass(frozen=True)
class EnvironmentFacts:
    registry_reboot_pending: bool = False
    service_reboot_pending: bool = False
    uptime_days: int = 0
    running_build_number: int = 0
    recent_or_upcoming_deadline_count: int = 0


@runtime_checkable
class PredicateProvider(Protocol):
    """Answers questions about the host. Absent agents report False/0, never raise."""

    def registry_reboot_pending(self) -> bool:
        """Pending reboot flagged by the registry."""

    def service_reboot_pending(self) -> bool:
        """Pending reboot reported by the management agent service."""

    def uptime_days(self) -> int:
        """Whole days since last boot."""

    def running_build_number(self) -> int:
        """Build number of the running OS."""

    def recent_or_upcoming_deadline_count(self) -> int:
        """Updates whose deadline falls within 24 hours of now, either side."""


def gather_facts(config: Configuration, provider: PredicateProvider) -> EnvironmentFacts:
    logger = logging.getLogger(__name__)
    registry_pending = False
    service_pending = False
    uptime = 0
    build = 0
    deadlines = 0

    if config.has(Feature.UPGRADE_OS):
        build = provider.running_build_number()
        logger.debug("Running build %s, target %s", build, config.target_build_number)
    if config.has(Feature.PENDING_REBOOT_UPTIME):
        uptime = provider.uptime_days()
        logger.debug("Uptime %s days, max %s", uptime, config.max_uptime_days)
    if config.has(Feature.PENDING_REBOOT_CHECK):
        registry_pending = provider.registry_reboot_pending()
        service_pending = provider.service_reboot_pending()
        logger.debug("Reboot pending: registry=%s service=%s", registry_pending, service_pending)
    if config.has(Feature.RECENT_DEADLINE_CHECK):
        deadlines = provider.recent_or_upcoming_deadline_count()
        logger.debug("Deadlines within window: %s", deadlines)

    return EnvironmentFacts(
        registry_reboot_pending=registry_pending,
        service_reboot_pending=service_pending,
        uptime_days=uptime,
        running_build_number=build,
        recent_or_upcoming_deadline_count=deadlines,
    )
