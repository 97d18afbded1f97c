from __future__ import annotations

import sys

from .base import BasePresenter
from .desktop import DesktopPresenter, DesktopSettings
from .webhook import WebhookPresenter, WebhookSettings
from .windows import WindowsToastPresenter, WindowsToastSettings
from ..config import Configuration


USER_AGENT = "toastnotify/0.1"


def build_presenter(config: Configuration, platform: str | None = None) -> BasePresenter:
    settings = config.presenter
    presenter_type = settings.type
    if presenter_type == "auto":
        presenter_type = "windows" if (platform or sys.platform) == "win32" else "desktop"

    if presenter_type == "windows":
        return WindowsToastPresenter(WindowsToastSettings(timeout_seconds=settings.timeout_seconds))
    if presenter_type == "webhook":
        return WebhookPresenter(
            WebhookSettings(
                url=settings.url or "",
                headers=dict(settings.headers),
                timeout_seconds=settings.timeout_seconds,
                user_agent=USER_AGENT,
            )
        )
    return DesktopPresenter(DesktopSettings(timeout_seconds=settings.timeout_seconds))
