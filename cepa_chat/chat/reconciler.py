"""
Conversation state for the CEPA Assistant.

A ChatConversation owns the visible transcript and walks each exchange through

    idle -> awaiting_response -> (reconciled | rolled_back)

The user's message is appended optimistically under a temporary id. On success
it is swapped for the server-confirmed pair (user echo + assistant reply); on
failure it is removed and an inline error is set. Only one exchange can be in
flight at a time, so the optimistic entry is always the last message.

Both the full-page view and the widget drive this class; they differ only in
``max_messages`` and the session store they pass in.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Protocol
from uuid import uuid4

from cepa_chat.chat.chat_types import (
    TEMP_ID_PREFIX,
    ChatMessage,
    ChatResponse,
    ChatSession,
    UserMessage,
)
from cepa_chat.chat.session_store import InMemorySessionStore, SessionStore
from cepa_chat.client.base import APIError
from cepa_chat.config import ChatViewConfig
from cepa_chat.logging_utils import get_logger

logger = get_logger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to send message"


class ChatTransport(Protocol):
    def send_message(self, query: str, session_id: Optional[str] = None) -> ChatResponse: ...

    def get_session(self, session_id: str) -> ChatSession: ...


class ExchangeState(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"
    RECONCILED = "reconciled"
    ROLLED_BACK = "rolled_back"


@dataclass(frozen=True)
class PendingExchange:
    temp_id: str
    query: str
    session_id: Optional[str]


def _temp_id() -> str:
    return f"{TEMP_ID_PREFIX}{uuid4().hex}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatConversation:
    def __init__(
        self,
        transport: ChatTransport,
        store: Optional[SessionStore] = None,
        *,
        max_messages: Optional[int] = None,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        # Trimming must drop whole exchanges (user + assistant), never half of one
        if max_messages is not None and (max_messages < 2 or max_messages % 2):
            raise ValueError("max_messages must be an even number >= 2")
        self._transport = transport
        self._store: SessionStore = store if store is not None else InMemorySessionStore()
        self.max_messages = max_messages
        self._id_factory = id_factory or _temp_id
        self._clock = clock or _utcnow

        self._messages: List[ChatMessage] = []
        self._pending: Optional[PendingExchange] = None
        self.session_id: Optional[str] = None
        self.error: Optional[str] = None
        self.state = ExchangeState.IDLE

    @classmethod
    def for_view(
        cls,
        transport: ChatTransport,
        view: ChatViewConfig,
        store: Optional[SessionStore] = None,
    ) -> "ChatConversation":
        if not view.persist_session:
            store = InMemorySessionStore()
        return cls(transport, store, max_messages=view.max_messages)

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    @property
    def awaiting_response(self) -> bool:
        return self._pending is not None

    @property
    def pending(self) -> Optional[PendingExchange]:
        return self._pending

    # ------------------------------------------------------------------
    # Exchange lifecycle
    # ------------------------------------------------------------------

    def begin(self, text: str) -> Optional[PendingExchange]:
        """Append the optimistic user message; None when the submit is inert."""
        query = (text or "").strip()
        if not query or self._pending is not None:
            return None

        pending = PendingExchange(temp_id=self._id_factory(), query=query, session_id=self.session_id)
        optimistic = UserMessage(id=pending.temp_id, content=query, created_at=self._clock())

        self.error = None
        self._messages = [*self._messages, optimistic]
        self.state = ExchangeState.AWAITING_RESPONSE
        self._pending = pending
        return pending

    def resolve(self, pending: PendingExchange, response: ChatResponse) -> None:
        self._require_in_flight(pending)

        user, assistant = response.to_messages(pending.query)
        merged = [m for m in self._messages if m.id != pending.temp_id]
        merged.extend((user, assistant))
        if self.max_messages is not None:
            merged = merged[-self.max_messages:]

        if self.session_id is None:
            self.session_id = response.session_id
            self._store.set(response.session_id)
            logger.info("[CHAT] Started session %s", response.session_id)

        self._messages = merged
        self.state = ExchangeState.RECONCILED
        self._pending = None

    def fail(self, pending: PendingExchange, exc: BaseException) -> None:
        self._require_in_flight(pending)

        self._messages = [m for m in self._messages if m.id != pending.temp_id]
        self.error = str(exc) or DEFAULT_ERROR_MESSAGE
        self.state = ExchangeState.ROLLED_BACK
        self._pending = None

    def complete(self, pending: PendingExchange) -> bool:
        """Send a begun exchange and reconcile or roll back. True on success."""
        self._require_in_flight(pending)
        try:
            response = self._transport.send_message(pending.query, pending.session_id)
        except (APIError, ValueError) as exc:
            logger.warning("[CHAT] Send failed (session=%s): %s", pending.session_id, exc)
            self.fail(pending, exc)
            return False
        except Exception as exc:
            logger.error("[CHAT] Unexpected error while sending: %r", exc)
            self.fail(pending, exc)
            raise

        self.resolve(pending, response)
        return True

    def submit(self, text: str) -> bool:
        pending = self.begin(text)
        if pending is None:
            return False
        return self.complete(pending)

    # ------------------------------------------------------------------
    # Session handling
    # ------------------------------------------------------------------

    def restore(self) -> bool:
        """Load the persisted session; a stale id is dropped without an error."""
        if self._pending is not None:
            return False
        saved = self._store.get()
        if not saved:
            return False

        try:
            session = self._transport.get_session(saved)
        except (APIError, ValueError) as exc:
            logger.warning("[CHAT] Discarding persisted session %s: %s", saved, exc)
            self._store.clear()
            self._reset()
            return False

        self.session_id = saved
        self._messages = list(session.messages)
        self.error = None
        self.state = ExchangeState.IDLE
        logger.info("[CHAT] Restored session %s (%d messages)", saved, len(self._messages))
        return True

    def new_chat(self) -> None:
        """Forget the current conversation locally; the server record is kept."""
        if self._pending is not None:
            return
        self._store.clear()
        self._reset()

    def dismiss_error(self) -> None:
        self.error = None

    def _reset(self) -> None:
        self._messages = []
        self.session_id = None
        self.error = None
        self.state = ExchangeState.IDLE

    def _require_in_flight(self, pending: PendingExchange) -> None:
        if pending is not self._pending:
            raise RuntimeError(f"exchange {pending.temp_id} is not in flight")
