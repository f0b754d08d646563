"""Compact chat widget for the sidebar.

Shares the conversation logic with the full page, but keeps the session in
memory only and does not cap the transcript.

Intended usage:
    from scripts.dashboard.components.chat_window import render_chat_window
    with st.sidebar:
        render_chat_window()
"""

from __future__ import annotations

import streamlit as st

from cepa_chat.config import WIDGET
from scripts.dashboard.chat_state import get_conversation, send_and_render
from scripts.dashboard.components.message_bubble import render_error, render_message

_OPEN_KEY = "chat_window_open"
_MINIMIZED_KEY = "chat_window_minimized"


def render_chat_window() -> None:
    """Render the launcher button, or the open widget with its transcript."""
    st.session_state.setdefault(_OPEN_KEY, False)
    st.session_state.setdefault(_MINIMIZED_KEY, False)

    if not st.session_state[_OPEN_KEY]:
        if st.button("💬 Chat with CEPA Assistant", key="chat_window_launch", use_container_width=True):
            st.session_state[_OPEN_KEY] = True
            st.rerun()
        return

    conversation = get_conversation(WIDGET)

    header, minimize, close = st.columns([3, 1, 1])
    with header:
        st.markdown("**CEPA Assistant** `ALPHA`")
    with minimize:
        label = "▢" if st.session_state[_MINIMIZED_KEY] else "—"
        if st.button(label, key="chat_window_minimize", help="Minimize"):
            st.session_state[_MINIMIZED_KEY] = not st.session_state[_MINIMIZED_KEY]
            st.rerun()
    with close:
        if st.button("✕", key="chat_window_close", help="Close"):
            st.session_state[_OPEN_KEY] = False
            st.rerun()

    if st.session_state[_MINIMIZED_KEY]:
        return

    with st.container(height=400):
        if not conversation.messages:
            st.caption("Hi! Ask me about CEPA's work, publications or parliamentary proceedings.")
        for message in conversation.messages:
            render_message(message)
        render_error(conversation.error)

    with st.form("chat_window_form", clear_on_submit=True, border=False):
        text = st.text_input(
            "Message",
            placeholder="Type your message...",
            label_visibility="collapsed",
            disabled=conversation.awaiting_response,
        )
        sent = st.form_submit_button("Send", disabled=conversation.awaiting_response)
    if sent and text:
        send_and_render(conversation, text)
