"""Chat package: message types, session persistence and the conversation reconciler."""

from .chat_types import (
    AssistantMessage,
    ChatMessage,
    ChatQuery,
    ChatResponse,
    ChatSession,
    SessionUpdate,
    UserMessage,
    is_optimistic,
)
from .session_store import FileSessionStore, InMemorySessionStore, SessionStore
from .reconciler import ChatConversation, ExchangeState, PendingExchange

__all__ = [
    'AssistantMessage',
    'ChatMessage',
    'ChatQuery',
    'ChatResponse',
    'ChatSession',
    'SessionUpdate',
    'UserMessage',
    'is_optimistic',
    'FileSessionStore',
    'InMemorySessionStore',
    'SessionStore',
    'ChatConversation',
    'ExchangeState',
    'PendingExchange',
]
