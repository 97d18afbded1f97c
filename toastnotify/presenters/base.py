from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio

from ..assembler import NotificationDocument
from ..config import AppIdentity


class PresentError(Exception):
    """The notification surface could not render the document."""


class BasePresenter(ABC):
    @abstractmethod
    async def render(self, document: NotificationDocument, app_identity: AppIdentity) -> None:
        """Render the document. Raises PresentError on failure."""
        raise NotImplementedError

    async def speak(self, text: str) -> None:
        """Read text aloud. Best effort, never raises."""
        return None


async def run_command(args: list[str], timeout_seconds: float) -> tuple[int, str]:
    """Run a command and return (returncode, stderr). Raises PresentError if it cannot run."""
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise PresentError(f"Could not start {args[0]}: {exc}") from exc

    try:
        _, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout_seconds)
    except asyncio.TimeoutError as exc:
        process.kill()
        await process.wait()
        raise PresentError(f"{args[0]} timed out after {timeout_seconds}s") from exc
    return process.returncode, (stderr or b"").decode("utf-8", errors="replace").strip()
