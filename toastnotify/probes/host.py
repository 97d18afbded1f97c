from __future__ import annotations

from datetime import datetime
import logging
from pathlib import Path
import subprocess
import sys

from .static import count_near_deadlines


REBOOT_PENDING_KEYS = (
    r"SOFTWARE\Microsoft\Windows\CurrentVersion\Component Based Servicing\RebootPending",
    r"SOFTWARE\Microsoft\Windows\CurrentVersion\WindowsUpdate\Auto Update\RebootRequired",
)
REBOOT_REQUIRED_FILE = Path("/var/run/reboot-required")
AGENT_SERVICE = "ccmexec"

_AGENT_REBOOT_QUERY = (
    "(Invoke-CimMethod -Namespace root\\ccm\\ClientSDK -ClassName CCM_ClientUtilities "
    "-MethodName DetermineIfRebootPending).RebootPending"
)
_AGENT_DEADLINE_QUERY = (
    "Get-CimInstance -Namespace root\\ccm\\ClientSDK -ClassName CCM_SoftwareUpdate | "
    "Where-Object { $_.Deadline } | ForEach-Object { $_.Deadline.ToUniversalTime().ToString('u') }"
)


class HostPredicateProvider:
    """Probes the local machine. Missing agents or unsupported platforms yield False/0."""

    def __init__(self, platform: str | None = None, timeout_seconds: int = 30) -> None:
        self._platform = platform or sys.platform
        self._timeout = timeout_seconds
        self._logger = logging.getLogger(__name__)

    @property
    def _windows(self) -> bool:
        return self._platform == "win32"

    def registry_reboot_pending(self) -> bool:
        if not self._windows:
            return REBOOT_REQUIRED_FILE.exists()

        import winreg

        for key_path in REBOOT_PENDING_KEYS:
            try:
                with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, key_path):
                    self._logger.info("Registry reports pending reboot: %s", key_path)
                    return True
            except FileNotFoundError:
                continue
            except OSError as exc:
                self._logger.warning("Could not read %s: %s", key_path, exc)
        return False

    def service_reboot_pending(self) -> bool:
        if not self._agent_installed():
            self._logger.warning("Management agent (%s) not found; skipping reboot check", AGENT_SERVICE)
            return False
        output = self._powershell(_AGENT_REBOOT_QUERY)
        if output is None:
            return False
        return output.strip().lower() == "true"

    def uptime_days(self) -> int:
        seconds = self._uptime_seconds()
        if seconds is None:
            self._logger.warning("Uptime unavailable on %s", self._platform)
            return 0
        return int(seconds // 86400)

    def running_build_number(self) -> int:
        if not self._windows:
            self._logger.warning("OS build number only available on Windows")
            return 0
        return sys.getwindowsversion().build

    def recent_or_upcoming_deadline_count(self) -> int:
        if not self._agent_installed():
            self._logger.warning("Management agent (%s) not found; no deadlines to check", AGENT_SERVICE)
            return 0
        output = self._powershell(_AGENT_DEADLINE_QUERY)
        if not output:
            return 0
        deadlines = []
        for line in output.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                deadlines.append(datetime.fromisoformat(line.replace("Z", "+00:00")))
            except ValueError:
                self._logger.warning("Ignoring unparseable deadline %r", line)
        return count_near_deadlines(deadlines)

    def _uptime_seconds(self) -> float | None:
        if self._windows:
            import ctypes

            ctypes.windll.kernel32.GetTickCount64.restype = ctypes.c_ulonglong
            return ctypes.windll.kernel32.GetTickCount64() / 1000.0
        try:
            with open("/proc/uptime", "r", encoding="utf-8") as handle:
                return float(handle.read().split()[0])
        except (OSError, ValueError, IndexError):
            return None

    def _agent_installed(self) -> bool:
        if not self._windows:
            return False
        output = self._powershell(f"(Get-Service -Name {AGENT_SERVICE} -ErrorAction SilentlyContinue).Name")
        return bool(output and output.strip())

    def _powershell(self, command: str) -> str | None:
        try:
            result = subprocess.run(
                ["powershell.exe", "-NoProfile", "-NonInteractive", "-Command", command],
                capture_output=True,
                text=True,
                check=False,
                timeout=self._timeout,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired) as exc:
            self._logger.warning("PowerShell probe failed: %s", exc)
            return None
        if result.returncode != 0:
            self._logger.warning("PowerShell probe exited with %s: %s", result.returncode, result.stderr.strip())
            return None
        return result.stdout
