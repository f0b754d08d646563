"""
Pytest configuration and fixtures for all tests.

Provides fake chatbot payloads and an in-memory transport so the conversation
reconciler can be exercised without a backend.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from cepa_chat.chat.chat_types import ChatResponse, ChatSession
from cepa_chat.client.base import APIError


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "ui: marks tests that import Streamlit dashboard modules"
    )


def chat_response_payload(n: int = 1, session_id: str = "sess-1", **overrides: Any) -> Dict[str, Any]:
    payload = {
        "session_id": session_id,
        "user_message_id": f"u{n}",
        "assistant_message_id": f"a{n}",
        "answer": f"answer {n}",
        "source_document_name": "Annual Report 2023",
        "source_document_url": "https://cepa.or.ug/docs/annual-report-2023.pdf",
        "source_document_type": "pdf",
        "confidence": 0.87,
        "timestamp": "2024-05-01T10:00:00Z",
    }
    payload.update(overrides)
    return payload


def session_payload(session_id: str = "sess-1", messages: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    return {
        "id": session_id,
        "session_title": "About CEPA",
        "started_at": "2024-05-01T09:00:00Z",
        "last_activity": "2024-05-01T10:00:00Z",
        "is_active": True,
        "message_count": len(messages or []),
        "messages": messages or [],
    }


class FakeChatTransport:
    """Scripted stand-in for ChatbotClient.

    ``replies`` is consumed in order; each item is either a ChatResponse payload
    dict or an exception instance to raise.
    """

    def __init__(self, replies=None, sessions=None):
        self.replies = list(replies or [])
        self.sessions = dict(sessions or {})
        self.sent: List[tuple] = []
        self.session_lookups: List[str] = []

    def send_message(self, query: str, session_id: Optional[str] = None) -> ChatResponse:
        self.sent.append((query, session_id))
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return ChatResponse.model_validate(reply)

    def get_session(self, session_id: str) -> ChatSession:
        self.session_lookups.append(session_id)
        if session_id not in self.sessions:
            raise APIError(status_code=404, message="Not found.")
        return ChatSession.model_validate(self.sessions[session_id])


@pytest.fixture
def fake_transport():
    return FakeChatTransport()


@pytest.fixture
def make_reply():
    """Factory for /chatbot/chat/ response payloads."""
    return chat_response_payload


@pytest.fixture
def make_session():
    """Factory for /chatbot/sessions/{id}/ payloads."""
    return session_payload
