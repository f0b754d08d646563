"""
cepa_chat.client

Lightweight Python client for the CEPA chatbot API.
"""

from __future__ import annotations

from typing import Optional

import httpx

from cepa_chat.cache import TTLCache
from cepa_chat.client.base import APIError, BaseHTTPClient, MalformedResponseError
from cepa_chat.client.chatbot import ChatbotClient
from cepa_chat.config import get_config


class CEPAClient:
    """
    Top-level API client.

    Example:
        with CEPAClient() as client:
            reply = client.chatbot.send_message("What is CEPA?")
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        cfg = get_config()
        self.http = BaseHTTPClient(
            api_url=api_url or cfg.api.url,
            api_key=api_key if api_key is not None else (cfg.api.api_key or None),
            timeout=timeout if timeout is not None else cfg.api.timeout,
            transport=transport,
        )
        self.chatbot = ChatbotClient(self.http, cache=TTLCache(cfg.cache.session_list_ttl))

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "CEPAClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = [
    "APIError",
    "MalformedResponseError",
    "CEPAClient",
    "ChatbotClient",
]
