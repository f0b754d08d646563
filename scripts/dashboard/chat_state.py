"""Binds ChatConversation instances to Streamlit session state.

The full-page session pointer is kept per browser: each visitor gets a client
id carried in the page URL (``?cid=...``), and the file store is keyed by it,
so one visitor never restores another's conversation.
"""

from __future__ import annotations

import re
from typing import Optional
from uuid import uuid4

import streamlit as st

from cepa_chat.chat.reconciler import ChatConversation, PendingExchange
from cepa_chat.chat.session_store import FileSessionStore, SessionStore
from cepa_chat.client import CEPAClient
from cepa_chat.config import ChatViewConfig, get_config
from cepa_chat.logging_utils import get_logger

from scripts.dashboard.components.message_bubble import render_message, render_typing_indicator

logger = get_logger(__name__)

CLIENT_ID_PARAM = "cid"
_CLIENT_ID_RE = re.compile(r"^[0-9a-f]{32}$")


@st.cache_resource
def get_client() -> CEPAClient:
    """One HTTP client per server process."""
    return CEPAClient()


def get_client_id() -> str:
    """Return this browser's client id, minting one into the URL on first visit."""
    client_id = st.query_params.get(CLIENT_ID_PARAM)
    if client_id and _CLIENT_ID_RE.match(client_id):
        return client_id
    client_id = uuid4().hex
    st.query_params[CLIENT_ID_PARAM] = client_id
    logger.debug("[DASHBOARD] Issued client id %s", client_id)
    return client_id


def client_store_key(base_key: str, client_id: str) -> str:
    return f"{base_key}:{client_id}"


def _default_store(view: ChatViewConfig, client_id: str) -> Optional[SessionStore]:
    if not view.persist_session:
        return None
    cfg = get_config().chat
    return FileSessionStore(cfg.session_file, key=client_store_key(cfg.session_key, client_id))


def conversation_key(view: ChatViewConfig) -> str:
    return f"cepa_chat_{view.name}"


def get_conversation(view: ChatViewConfig) -> ChatConversation:
    """Return the view's conversation, restoring the persisted session on first use."""
    key = conversation_key(view)
    if key not in st.session_state:
        store = _default_store(view, get_client_id()) if view.persist_session else None
        conversation = ChatConversation.for_view(get_client().chatbot, view, store)
        if view.persist_session:
            conversation.restore()
        st.session_state[key] = conversation
    return st.session_state[key]


def discard_conversation(view: ChatViewConfig) -> None:
    """Drop the view's in-memory conversation (the widget's on navigation)."""
    st.session_state.pop(conversation_key(view), None)


def send_and_render(conversation: ChatConversation, text: str) -> None:
    """Show the optimistic bubble + typing dots, block on the send, then rerun."""
    pending: Optional[PendingExchange] = conversation.begin(text)
    if pending is None:
        return

    render_message(conversation.messages[-1])
    indicator = st.empty()
    with indicator.container():
        render_typing_indicator()
    conversation.complete(pending)
    indicator.empty()
    st.rerun()
