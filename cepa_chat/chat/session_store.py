"""
Persistence port for the active chat session id.

The full-page view keeps the id in a small JSON file so a conversation
survives a restart; the widget keeps it in memory only.
"""

from __future__ import annotations

import json
from pathlib import Path
from threading import Lock
from typing import Dict, Optional, Protocol, Union

from cepa_chat.logging_utils import get_logger

logger = get_logger(__name__)

DEFAULT_SESSION_KEY = "chatbot_session_id"


class SessionStore(Protocol):
    def get(self) -> Optional[str]: ...

    def set(self, session_id: str) -> None: ...

    def clear(self) -> None: ...


class InMemorySessionStore:
    def __init__(self, session_id: Optional[str] = None):
        self._session_id = session_id

    def get(self) -> Optional[str]:
        return self._session_id

    def set(self, session_id: str) -> None:
        self._session_id = session_id

    def clear(self) -> None:
        self._session_id = None


class FileSessionStore:
    """
    Key/value JSON file holding the session id under ``key``.

    Other keys in the file are preserved, so several views can share one file.
    A missing, unreadable or corrupt file reads as "no session".
    """

    def __init__(self, path: Union[str, Path], key: str = DEFAULT_SESSION_KEY):
        self.path = Path(path).expanduser()
        self.key = key
        self._lock = Lock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("[SESSION-STORE] Ignoring unreadable store %s: %r", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("[SESSION-STORE] Ignoring malformed store %s", self.path)
            return {}
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    def get(self) -> Optional[str]:
        with self._lock:
            value = self._read().get(self.key)
        return value if isinstance(value, str) and value else None

    def set(self, session_id: str) -> None:
        with self._lock:
            data = self._read()
            data[self.key] = session_id
            self._write(data)
        logger.debug("[SESSION-STORE] Persisted session %s to %s", session_id, self.path)

    def clear(self) -> None:
        with self._lock:
            data = self._read()
            if self.key not in data:
                return
            del data[self.key]
            self._write(data)
        logger.debug("[SESSION-STORE] Cleared %s in %s", self.key, self.path)
