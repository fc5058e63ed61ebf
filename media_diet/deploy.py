"""Deploy hook notification after new data is persisted."""

from __future__ import annotations

import logging

import requests

from .config import DEFAULT_REQUEST_TIMEOUT

LOGGER = logging.getLogger(__name__)


class DeployHook:
    """POSTs to a static-site deploy hook. Failures are logged, never raised."""

    def __init__(self, url: str, timeout: int = DEFAULT_REQUEST_TIMEOUT) -> None:
        self.url = url
        self.timeout = timeout

    def notify(self) -> bool:
        """Trigger the hook and return whether it accepted the request."""

        if not self.url:
            LOGGER.warning("CF_PAGES_DEPLOY_HOOK_URL not set; skipping deploy trigger.")
            return False

        try:
            response = requests.post(self.url, timeout=self.timeout)
        except requests.RequestException as exc:
            LOGGER.warning("Deploy hook request failed: %s", exc)
            return False

        if not response.ok:
            LOGGER.warning("Deploy hook failed: %s %s %s", response.status_code, response.reason, response.text)
            return False

        LOGGER.info("Deploy hook triggered")
        return True


__all__ = ["DeployHook"]
