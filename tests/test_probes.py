from __future__ import annotations

import subprocess
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from toastnotify.config import Configuration, Feature
from toastnotify.facts import PredicateProvider, gather_facts
from toastnotify.probes import HostPredicateProvider, StaticPredicateProvider, count_near_deadlines
from toastnotify.probes.static import facts_from_dict


class _CountingProvider:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def registry_reboot_pending(self) -> bool:
        self.calls.append("registry")
        return True

    def service_reboot_pending(self) -> bool:
        self.calls.append("service")
        return True

    def uptime_days(self) -> int:
        self.calls.append("uptime")
        return 3

    def running_build_number(self) -> int:
        self.calls.append("build")
        return 17763

    def recent_or_upcoming_deadline_count(self) -> int:
        self.calls.append("deadlines")
        return 1


class GatherFactsTests(unittest.TestCase):
    def test_no_probes_when_no_feature_enabled(self) -> None:
        provider = _CountingProvider()
        facts = gather_facts(Configuration(), provider)
        self.assertEqual(provider.calls, [])
        self.assertEqual(facts.running_build_number, 0)

    def test_reboot_check_queries_both_probes(self) -> None:
        provider = _CountingProvider()
        config = Configuration(features=frozenset({Feature.PENDING_REBOOT_CHECK}))
        facts = gather_facts(config, provider)
        self.assertEqual(provider.calls, ["registry", "service"])
        self.assertTrue(facts.registry_reboot_pending)
        self.assertTrue(facts.service_reboot_pending)

    def test_each_probe_called_once(self) -> None:
        provider = _CountingProvider()
        config = Configuration(
            features=frozenset({Feature.UPGRADE_OS, Feature.RECENT_DEADLINE_CHECK}),
            target_build_number=18351,
        )
        facts = gather_facts(config, provider)
        self.assertEqual(provider.calls, ["build", "deadlines"])
        self.assertEqual(facts.recent_or_upcoming_deadline_count, 1)

    def test_providers_satisfy_protocol(self) -> None:
        self.assertIsInstance(_CountingProvider(), PredicateProvider)
        self.assertIsInstance(StaticPredicateProvider(), PredicateProvider)
        self.assertIsInstance(HostPredicateProvider(platform="linux"), PredicateProvider)


class DeadlineWindowTests(unittest.TestCase):
    def test_counts_past_and_future_within_window(self) -> None:
        now = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
        deadlines = [
            now - timedelta(hours=23),
            now + timedelta(hours=24),
            now + timedelta(hours=25),
            now - timedelta(days=3),
        ]
        self.assertEqual(count_near_deadlines(deadlines, now), 2)

    def test_naive_deadlines_treated_as_utc(self) -> None:
        now = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
        self.assertEqual(count_near_deadlines([datetime(2024, 1, 10, 18, 0)], now), 1)

    def test_facts_from_dict(self) -> None:
        provider = facts_from_dict(
            {
                "registry_reboot_pending": "False",
                "service_reboot_pending": "True",
                "uptime_days": 10,
                "running_build_number": "17763",
                "deadlines": ["2024-01-10T08:00:00+00:00"],
            }
        )
        provider.now = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
        self.assertFalse(provider.registry_reboot_pending())
        self.assertTrue(provider.service_reboot_pending())
        self.assertEqual(provider.uptime_days(), 10)
        self.assertEqual(provider.running_build_number(), 17763)
        self.assertEqual(provider.recent_or_upcoming_deadline_count(), 1)

    def test_facts_reject_bad_numbers(self) -> None:
        with self.assertRaises(ValueError):
            facts_from_dict({"uptime_days": "ten"})


class HostProviderTests(unittest.TestCase):
    def test_missing_agent_is_warning_not_error(self) -> None:
        provider = HostPredicateProvider(platform="win32")
        with patch("toastnotify.probes.host.subprocess.run", side_effect=FileNotFoundError("powershell.exe")):
            with self.assertLogs("toastnotify.probes.host", level="WARNING"):
                self.assertFalse(provider.service_reboot_pending())
                self.assertEqual(provider.recent_or_upcoming_deadline_count(), 0)

    def test_agent_reboot_flag_parsed(self) -> None:
        provider = HostPredicateProvider(platform="win32")
        outputs = [
            subprocess.CompletedProcess([], 0, stdout="CcmExec\n", stderr=""),
            subprocess.CompletedProcess([], 0, stdout="True\n", stderr=""),
        ]
        with patch("toastnotify.probes.host.subprocess.run", side_effect=outputs):
            self.assertTrue(provider.service_reboot_pending())

    def test_non_windows_service_check_is_false(self) -> None:
        provider = HostPredicateProvider(platform="linux")
        with self.assertLogs("toastnotify.probes.host", level="WARNING"):
            self.assertFalse(provider.service_reboot_pending())

    def test_uptime_days_from_seconds(self) -> None:
        provider = HostPredicateProvider(platform="linux")
        with patch.object(HostPredicateProvider, "_uptime_seconds", return_value=10 * 86400 + 500):
            self.assertEqual(provider.uptime_days(), 10)
