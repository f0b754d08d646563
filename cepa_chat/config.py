# cepa_chat/config.py

"""
Central configuration for the CEPA Assistant chat client.

Values are read from environment variables or a .env file in the working
directory. Nothing here is required: every setting has a default that points
at the production chatbot backend.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _optional_int(value: str) -> Optional[int]:
    value = value.strip().lower()
    if value in ("", "0", "none", "unlimited"):
        return None
    return int(value)


# ---------------------------------------------------------
#  Chatbot API
# ---------------------------------------------------------

CEPA_API_URL = os.getenv("CEPA_API_URL", "https://cepa-backend-production.up.railway.app")
CEPA_API_KEY = os.getenv("CEPA_API_KEY", "")  # Optional, the public backend needs none
CEPA_API_TIMEOUT = float(os.getenv("CEPA_API_TIMEOUT", "30"))

# ---------------------------------------------------------
#  Conversation retention + session persistence
# ---------------------------------------------------------

# Full-page view keeps the latest 5 exchanges (user + assistant = 10 messages).
# Must be even so trimming drops whole exchanges.
CHAT_MAX_MESSAGES = _optional_int(os.getenv("CEPA_CHAT_MAX_MESSAGES", "10"))
CHAT_SESSION_FILE = os.getenv(
    "CEPA_CHAT_SESSION_FILE",
    str(Path.home() / ".cepa_chat" / "session.json"),
)
CHAT_SESSION_KEY = os.getenv("CEPA_CHAT_SESSION_KEY", "chatbot_session_id")

# ---------------------------------------------------------
#  Caching
# ---------------------------------------------------------

SESSION_CACHE_TTL = int(os.getenv("CEPA_SESSION_CACHE_TTL", "600"))


# ---------------------------------------------------------
#  CONFIG STRUCTURES
# ---------------------------------------------------------


@dataclass(frozen=True)
class ApiConfig:
    url: str = CEPA_API_URL
    api_key: str = CEPA_API_KEY
    timeout: float = CEPA_API_TIMEOUT


@dataclass(frozen=True)
class ChatConfig:
    max_messages: Optional[int] = CHAT_MAX_MESSAGES
    session_file: str = CHAT_SESSION_FILE
    session_key: str = CHAT_SESSION_KEY


@dataclass(frozen=True)
class CacheConfig:
    session_list_ttl: int = SESSION_CACHE_TTL


@dataclass(frozen=True)
class ChatViewConfig:
    """Retention and persistence policy for one chat presentation."""

    name: str
    max_messages: Optional[int]
    persist_session: bool


# The full page restores and caps the transcript; the widget lives in memory only.
FULL_PAGE = ChatViewConfig(name="full_page", max_messages=CHAT_MAX_MESSAGES, persist_session=True)
WIDGET = ChatViewConfig(name="widget", max_messages=None, persist_session=False)


@dataclass(frozen=True)
class AppConfig:
    api: ApiConfig
    chat: ChatConfig
    cache: CacheConfig


# ---------------------------------------------------------
#  SINGLETON ACCESSOR
# ---------------------------------------------------------

_config_singleton: AppConfig | None = None


def get_config() -> AppConfig:
    global _config_singleton
    if _config_singleton is None:
        _config_singleton = AppConfig(
            api=ApiConfig(),
            chat=ChatConfig(),
            cache=CacheConfig(),
        )
    return _config_singleton
