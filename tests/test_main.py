from __future__ import annotations

import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock

from toastnotify.config import AppIdentity
from toastnotify.main import main
from toastnotify.presenters.base import BasePresenter, PresentError
from toastnotify.probes import StaticPredicateProvider


BASE_CONFIG = """
toast:
  enabled: {enabled}
features:
  pending_reboot_uptime: true
options:
  max_uptime_days: 5
  custom_audio:
    enabled: true
text:
  title: "Restart needed"
  custom_audio: "Please restart"
"""


class _RecordingPresenter(BasePresenter):
    def __init__(self, error: Exception | None = None) -> None:
        self.rendered = []
        self.spoken = []
        self._error = error

    async def render(self, document, app_identity) -> None:
        if self._error:
            raise self._error
        self.rendered.append((document, app_identity))

    async def speak(self, text: str) -> None:
        self.spoken.append(text)


class MainTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)

    def _config_path(self, enabled: str = "true") -> str:
        path = self.root / "config.yaml"
        path.write_text(BASE_CONFIG.format(enabled=enabled), encoding="utf-8")
        return str(path)

    async def test_fires_and_speaks(self) -> None:
        presenter = _RecordingPresenter()
        code = await main(
            ["--config", self._config_path()],
            provider=StaticPredicateProvider(uptime=10),
            presenter=presenter,
        )
        self.assertEqual(code, 0)
        self.assertEqual(len(presenter.rendered), 1)
        document, identity = presenter.rendered[0]
        self.assertEqual(identity, AppIdentity.SOFTWARE_CENTER)
        self.assertEqual(document.blocks[-1].text, "Computer uptime: 10 days")
        self.assertEqual(presenter.spoken, ["Please restart"])

    async def test_no_fire_exits_zero_without_rendering(self) -> None:
        presenter = _RecordingPresenter()
        code = await main(
            ["--config", self._config_path()],
            provider=StaticPredicateProvider(uptime=1),
            presenter=presenter,
        )
        self.assertEqual(code, 0)
        self.assertEqual(presenter.rendered, [])

    async def test_disabled_exits_one_before_probing(self) -> None:
        provider = AsyncMock()
        code = await main(["--config", self._config_path("false")], provider=provider)
        self.assertEqual(code, 1)
        self.assertEqual(provider.mock_calls, [])

    async def test_missing_config_exits_one(self) -> None:
        code = await main(["--config", str(self.root / "missing.yaml")])
        self.assertEqual(code, 1)

    async def test_present_error_is_swallowed(self) -> None:
        presenter = _RecordingPresenter(error=PresentError("no notification center"))
        code = await main(
            ["--config", self._config_path()],
            provider=StaticPredicateProvider(uptime=10),
            presenter=presenter,
        )
        self.assertEqual(code, 0)
        self.assertEqual(presenter.spoken, [])

    async def test_dry_run_prints_document(self) -> None:
        facts = self.root / "facts.yaml"
        facts.write_text("uptime_days: 12\n", encoding="utf-8")
        presenter = _RecordingPresenter()
        output = io.StringIO()
        with contextlib.redirect_stdout(output):
            code = await main(
                ["--config", self._config_path(), "--facts", str(facts), "--dry-run"],
                presenter=presenter,
            )
        self.assertEqual(code, 0)
        self.assertEqual(presenter.rendered, [])
        payload = json.loads(output.getvalue())
        self.assertEqual(payload["scenario"], "PendingRebootUptime")

    async def test_init_config_refuses_to_overwrite(self) -> None:
        target = self.root / "new.yaml"
        with contextlib.redirect_stdout(io.StringIO()):
            self.assertEqual(await main(["--config", str(target), "--init-config"]), 0)
        self.assertTrue(target.exists())
        self.assertEqual(await main(["--config", str(target), "--init-config"]), 1)

    async def test_disabled_logged_as_warning_not_error(self) -> None:
        with self.assertLogs("toastnotify.main", level="INFO") as logs:
            code = await main(["--config", self._config_path("false")], provider=StaticPredicateProvider())
        self.assertEqual(code, 1)
        self.assertEqual([record.levelname for record in logs.records], ["WARNING"])
        self.assertIn("disabled", logs.records[0].getMessage())
