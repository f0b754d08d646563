"""
Shared HTTP client utilities for the CEPA chatbot API client.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from cepa_chat.logging_utils import get_logger

logger = get_logger(__name__)


class APIError(Exception):
    """HTTP or network error from the API.

    ``status_code`` is 0 when the request never produced a response.
    """

    def __init__(self, status_code: int, message: str, response_text: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.response_text = response_text

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"APIError(status_code={self.status_code}, message={self.message!r})"


class MalformedResponseError(APIError):
    """A 2xx response whose body does not match the expected shape."""


def _error_message(resp: httpx.Response) -> str:
    # Backend errors look like {"error": "..."}; DRF validation uses {"detail": "..."}
    fallback = f"HTTP error! status: {resp.status_code}"
    try:
        data = resp.json()
    except ValueError:
        return fallback
    if isinstance(data, dict):
        for key in ("error", "detail"):
            if data.get(key):
                return str(data[key])
    return fallback


class BaseHTTPClient:
    """
    Thin wrapper around httpx.Client with consistent JSON headers + error handling.
    """

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str] = None,
        *,
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key

        final_headers: Dict[str, str] = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if headers:
            final_headers.update(headers)

        # Optional auth header (the public chatbot endpoints ignore it)
        if api_key:
            final_headers.setdefault("Authorization", f"Bearer {api_key}")

        self._client = httpx.Client(
            base_url=self.api_url,
            timeout=timeout,
            headers=final_headers,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "BaseHTTPClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            resp = self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            logger.warning("[HTTP] %s %s failed before a response: %r", method, path, exc)
            raise APIError(status_code=0, message=f"Network error: {exc}") from exc

        if 200 <= resp.status_code < 300:
            # 204 No Content
            if resp.status_code == 204 or not resp.content:
                return None
            try:
                return resp.json()
            except ValueError as exc:
                raise MalformedResponseError(
                    status_code=resp.status_code,
                    message=f"Invalid JSON in response: {method} {path}",
                    response_text=resp.text,
                ) from exc

        message = _error_message(resp)
        logger.warning("[HTTP] %s %s -> %s: %s", method, path, resp.status_code, message)
        raise APIError(status_code=resp.status_code, message=message, response_text=resp.text or "")
