"""
Chatbot resource client.

The backend exposes:
- POST   /chatbot/chat/
- GET    /chatbot/sessions/
- POST   /chatbot/sessions/
- GET    /chatbot/sessions/{session_id}/
- PATCH  /chatbot/sessions/{session_id}/
- DELETE /chatbot/sessions/{session_id}/

Session lifecycle calls are optional for the chat flow: the first successful
send_message creates the session implicitly.
"""

from __future__ import annotations

from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from cepa_chat.cache import TTLCache
from cepa_chat.chat.chat_types import ChatQuery, ChatResponse, ChatSession, SessionUpdate
from cepa_chat.client.base import BaseHTTPClient, MalformedResponseError
from cepa_chat.logging_utils import get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

_SESSIONS_KEY = "sessions"


def _parse(model: Type[M], payload: Any, path: str) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise MalformedResponseError(
            status_code=200,
            message=f"Unexpected response from {path}",
            response_text=str(payload),
        ) from exc


class ChatbotClient:
    def __init__(self, http: BaseHTTPClient, cache: Optional[TTLCache[List[ChatSession]]] = None):
        self._http = http
        self._cache: TTLCache[List[ChatSession]] = cache if cache is not None else TTLCache()

    def send_message(self, query: str, session_id: Optional[str] = None) -> ChatResponse:
        query = query.strip()
        if not query:
            raise ValueError("query must not be empty")

        body = ChatQuery(query=query, session_id=session_id or None)
        path = "/chatbot/chat/"
        payload = self._http._request("POST", path, json=body.model_dump(exclude_none=True))
        response = _parse(ChatResponse, payload, path)
        self._cache.invalidate(_SESSIONS_KEY)
        logger.info(
            "[CHATBOT-CLIENT] Sent message (session=%s, new_session=%s)",
            response.session_id,
            session_id is None,
        )
        return response

    def get_session(self, session_id: str) -> ChatSession:
        path = f"/chatbot/sessions/{session_id}/"
        payload = self._http._request("GET", path)
        return _parse(ChatSession, payload, path)

    def list_sessions(self) -> List[ChatSession]:
        return self._cache.get_or_load(_SESSIONS_KEY, self._fetch_sessions)

    def _fetch_sessions(self) -> List[ChatSession]:
        path = "/chatbot/sessions/"
        payload = self._http._request("GET", path)
        # Paginated responses wrap the list in {"results": [...]}
        if isinstance(payload, dict) and "results" in payload:
            payload = payload["results"]
        return [_parse(ChatSession, item, path) for item in (payload or [])]

    def create_session(self) -> ChatSession:
        path = "/chatbot/sessions/"
        payload = self._http._request("POST", path, json={})
        self._cache.invalidate(_SESSIONS_KEY)
        session = _parse(ChatSession, payload, path)
        logger.info("[CHATBOT-CLIENT] Created session %s", session.id)
        return session

    def update_session(self, session_id: str, update: SessionUpdate) -> ChatSession:
        path = f"/chatbot/sessions/{session_id}/"
        payload = self._http._request("PATCH", path, json=update.model_dump(exclude_none=True))
        self._cache.invalidate(_SESSIONS_KEY)
        return _parse(ChatSession, payload, path)

    def delete_session(self, session_id: str) -> None:
        self._http._request("DELETE", f"/chatbot/sessions/{session_id}/")
        self._cache.invalidate(_SESSIONS_KEY)
        logger.info("[CHATBOT-CLIENT] Deleted session %s", session_id)
