from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

import yaml

from ..config import parse_bool, parse_deadline


DEADLINE_WINDOW = timedelta(hours=24)


def count_near_deadlines(
    deadlines: Iterable[datetime],
    now: datetime | None = None,
    window: timedelta = DEADLINE_WINDOW,
) -> int:
    """Count deadlines within `window` of now, in the past or the future."""
    reference = now or datetime.now(timezone.utc)
    count = 0
    for deadline in deadlines:
        if abs(_aware(deadline) - _aware(reference)) <= window:
            count += 1
    return count


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class StaticPredicateProvider:
    """Fixed answers, typically read from a facts file."""

    registry_pending: bool = False
    service_pending: bool = False
    uptime: int = 0
    build: int = 0
    deadlines: list[datetime] = field(default_factory=list)
    now: datetime | None = None

    def registry_reboot_pending(self) -> bool:
        return self.registry_pending

    def service_reboot_pending(self) -> bool:
        return self.service_pending

    def uptime_days(self) -> int:
        return self.uptime

    def running_build_number(self) -> int:
        return self.build

    def recent_or_upcoming_deadline_count(self) -> int:
        return count_near_deadlines(self.deadlines, self.now)


def load_facts(path: str) -> StaticPredicateProvider:
    with open(path, "r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError("Facts root must be a mapping")
    return facts_from_dict(raw)


def facts_from_dict(raw: dict[str, Any]) -> StaticPredicateProvider:
    deadlines_raw = raw.get("deadlines") or []
    if not isinstance(deadlines_raw, list):
        raise ValueError("deadlines must be a list")
    deadlines = [parse_deadline(item, "deadlines") for item in deadlines_raw]
    try:
        uptime = int(raw.get("uptime_days", 0))
        build = int(raw.get("running_build_number", 0))
    except (TypeError, ValueError):
        raise ValueError("uptime_days and running_build_number must be integers")
    return StaticPredicateProvider(
        registry_pending=parse_bool(raw.get("registry_reboot_pending"), "registry_reboot_pending"),
        service_pending=parse_bool(raw.get("service_reboot_pending"), "service_reboot_pending"),
        uptime=uptime,
        build=build,
        deadlines=[item for item in deadlines if item is not None],
    )
