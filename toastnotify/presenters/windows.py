from __future__ import annotations

from dataclasses import dataclass
import logging

from .base import BasePresenter, PresentError, run_command
from .toast_xml import render_toast_xml
from ..assembler import NotificationDocument
from ..config import AppIdentity


APP_IDS = {
    AppIdentity.SOFTWARE_CENTER: "Microsoft.SoftwareCenter.DesktopToasts",
    AppIdentity.POWERSHELL: "{1AC14E77-02E7-4E5D-B744-2EB1AE5198B7}\\WindowsPowerShell\\v1.0\\powershell.exe",
}

_SHOW_TEMPLATE = """\
[Windows.UI.Notifications.ToastNotificationManager, Windows.UI.Notifications, ContentType = WindowsRuntime] > $null
[Windows.Data.Xml.Dom.XmlDocument, Windows.Data.Xml.Dom.XmlDocument, ContentType = WindowsRuntime] > $null
$xml = New-Object Windows.Data.Xml.Dom.XmlDocument
$xml.LoadXml('{xml}')
$toast = New-Object Windows.UI.Notifications.ToastNotification $xml
[Windows.UI.Notifications.ToastNotificationManager]::CreateToastNotifier('{app_id}').Show($toast)
"""

_SPEAK_TEMPLATE = """\
Add-Type -AssemblyName System.Speech
$speak = New-Object System.Speech.Synthesis.SpeechSynthesizer
$speak.Speak('{text}')
$speak.Dispose()
"""


@dataclass
class WindowsToastSettings:
    timeout_seconds: int
    executable: str = "powershell.exe"


class WindowsToastPresenter(BasePresenter):
    def __init__(self, settings: WindowsToastSettings) -> None:
        self._settings = settings
        self._logger = logging.getLogger(__name__)

    async def render(self, document: NotificationDocument, app_identity: AppIdentity) -> None:
        script = _SHOW_TEMPLATE.format(
            xml=_quote(render_toast_xml(document)),
            app_id=_quote(APP_IDS[app_identity]),
        )
        returncode, stderr = await run_command(self._command(script), self._settings.timeout_seconds)
        if returncode != 0:
            raise PresentError(f"Toast notifier exited with {returncode}: {stderr}")
        self._logger.debug("Toast shown as %s", APP_IDS[app_identity])

    async def speak(self, text: str) -> None:
        script = _SPEAK_TEMPLATE.format(text=_quote(text))
        try:
            returncode, stderr = await run_command(self._command(script), self._settings.timeout_seconds * 6)
        except PresentError as exc:
            self._logger.warning("Text-to-speech failed: %s", exc)
            return
        if returncode != 0:
            self._logger.warning("Text-to-speech exited with %s: %s", returncode, stderr)

    def _command(self, script: str) -> list[str]:
        return [
            self._settings.executable,
            "-NoProfile",
            "-NonInteractive",
            "-ExecutionPolicy",
            "Bypass",
            "-Command",
            script,
        ]


def _quote(value: str) -> str:
    # Single-quoted PowerShell literal.
    return value.replace("'", "''")
