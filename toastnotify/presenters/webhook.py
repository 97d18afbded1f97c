from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

import httpx

from .base import BasePresenter, PresentError
from ..assembler import NotificationDocument
from ..config import AppIdentity


@dataclass
class WebhookSettings:
    url: str
    headers: dict[str, str]
    timeout_seconds: int
    user_agent: str


class WebhookPresenter(BasePresenter):
    def __init__(self, settings: WebhookSettings) -> None:
        self._settings = settings
        self._logger = logging.getLogger(__name__)

    async def render(self, document: NotificationDocument, app_identity: AppIdentity) -> None:
        payload = _build_payload(document, app_identity)
        headers = {"User-Agent": self._settings.user_agent}
        headers.update(self._settings.headers)

        try:
            async with httpx.AsyncClient(timeout=self._settings.timeout_seconds) as client:
                response = await client.post(self._settings.url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise PresentError(f"Webhook request failed: {exc}") from exc
        if not 200 <= response.status_code < 300:
            raise PresentError(f"Webhook failed with status {response.status_code}")
        self._logger.debug("Webhook accepted notification (%s)", response.status_code)


def _build_payload(document: NotificationDocument, app_identity: AppIdentity) -> dict[str, Any]:
    return {
        "app_identity": app_identity.value,
        "document": document.to_dict(),
    }
