"""
Client for the remote generation endpoint.

The remote service wraps a provider server-side and does its own usage
accounting, so this client never meters locally. It has no streaming
support.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..core.errors import ProxyError

logger = logging.getLogger(__name__)


class ProxyClient:
    """Thin HTTP client for ``POST {base_url}/ai/generate``.

    Any transport failure, non-2xx answer, or malformed body surfaces as
    ``ProxyError``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        user_id: Optional[int] = None,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id
        self._client = client or httpx.Client(timeout=timeout)

    def generate(self, prompt: str, feature: str = "general") -> str:
        payload: Dict[str, Any] = {"prompt": prompt, "feature": feature}
        if self.user_id is not None:
            payload["userId"] = self.user_id

        url = f"{self.base_url}/ai/generate"
        logger.debug("ProxyClient.generate: POST %s feature=%s", url, feature)
        try:
            r = self._client.post(url, json=payload)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProxyError(
                f"Proxy generate failed: {e.response.status_code}",
                status_code=e.response.status_code,
                details=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise ProxyError(f"Proxy unreachable: {type(e).__name__}: {e}") from e

        try:
            data = r.json()
        except ValueError as e:
            raise ProxyError("Proxy returned a non-JSON body", status_code=r.status_code, details=r.text) from e
        if not isinstance(data, dict) or not isinstance(data.get("text"), str):
            raise ProxyError("Unexpected response shape from proxy", status_code=r.status_code, details=data)

        logger.debug("ProxyClient.generate: got %d characters", len(data["text"]))
        return data["text"]

    def health_check(self) -> bool:
        try:
            r = self._client.get(f"{self.base_url}/health")
        except httpx.HTTPError as e:
            logger.debug("ProxyClient.health_check failed: %s", e)
            return False
        return r.is_success

    def close(self) -> None:
        self._client.close()
