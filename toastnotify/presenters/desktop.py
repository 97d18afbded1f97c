from __future__ import annotations

from dataclasses import dataclass
import logging
import shutil

from .base import BasePresenter, PresentError, run_command
from ..assembler import NotificationDocument
from ..config import AppIdentity


APP_NAMES = {
    AppIdentity.SOFTWARE_CENTER: "Software Center",
    AppIdentity.POWERSHELL: "Windows PowerShell",
}

URGENCY = {
    "reminder": "critical",
    "long": "normal",
    "short": "low",
}


@dataclass
class DesktopSettings:
    timeout_seconds: int
    executable: str = "notify-send"
    speech_executable: str = "spd-say"


class DesktopPresenter(BasePresenter):
    """Freedesktop notifications through notify-send."""

    def __init__(self, settings: DesktopSettings) -> None:
        self._settings = settings
        self._logger = logging.getLogger(__name__)

    async def render(self, document: NotificationDocument, app_identity: AppIdentity) -> None:
        args = build_command(self._settings.executable, document, app_identity)
        returncode, stderr = await run_command(args, self._settings.timeout_seconds)
        if returncode != 0:
            raise PresentError(f"{self._settings.executable} exited with {returncode}: {stderr}")

    async def speak(self, text: str) -> None:
        if shutil.which(self._settings.speech_executable) is None:
            self._logger.warning("%s not found; skipping text-to-speech", self._settings.speech_executable)
            return
        try:
            await run_command([self._settings.speech_executable, "--wait", text], self._settings.timeout_seconds * 6)
        except PresentError as exc:
            self._logger.warning("Text-to-speech failed: %s", exc)


def build_command(executable: str, document: NotificationDocument, app_identity: AppIdentity) -> list[str]:
    args = [
        executable,
        "--app-name",
        APP_NAMES[app_identity],
        "--urgency",
        URGENCY.get(document.scenario_style, "normal"),
    ]
    if document.logo_image:
        args.extend(["--icon", document.logo_image])
    args.append(document.title)
    args.append(_body(document))
    return args


def _body(document: NotificationDocument) -> str:
    lines = [document.header] if document.header else []
    for block in document.blocks[1:]:
        if block.heading:
            lines.append(f"{block.heading} {block.text}")
        elif block.text:
            lines.append(block.text)
    labels = [action.label for action in document.actions]
    if labels:
        lines.append(" | ".join(labels))
    return "\n".join(lines)
