"""CEPA Assistant: full-page chat view."""

import streamlit as st

from cepa_chat.config import FULL_PAGE
from scripts.dashboard.chat_state import get_conversation, send_and_render
from scripts.dashboard.components.message_bubble import render_error, render_message

SUGGESTED_QUESTIONS = [
    "What is CEPA?",
    "Tell me about parliamentary accountability",
    "What publications does CEPA have?",
]


def _render_alpha_banner() -> None:
    st.warning(
        "**ALPHA VERSION**: this feature is in alpha testing.\n\n"
        "This AI assistant is still under development and may provide inaccurate or incomplete "
        "information. Please verify important information from official sources and report any "
        "issues you encounter."
    )


def _render_empty_state() -> str | None:
    st.markdown("#### 💬 Start a conversation")
    st.caption(
        "I can help you find information about CEPA's work, publications, parliamentary "
        "proceedings, and more. Try asking me a question!"
    )
    st.caption("SUGGESTED QUESTIONS:")
    picked = None
    for col, question in zip(st.columns(len(SUGGESTED_QUESTIONS)), SUGGESTED_QUESTIONS):
        with col:
            if st.button(question, key=f"suggest_{question}", use_container_width=True):
                picked = question
    return picked


def render_chat_page():
    conversation = get_conversation(FULL_PAGE)

    title_col, action_col = st.columns([4, 1])
    with title_col:
        st.title("CEPA Assistant")
        st.caption("Ask me anything about CEPA and parliamentary proceedings in Uganda")
    with action_col:
        if conversation.messages and st.button(
            "🗑️ New Chat", disabled=conversation.awaiting_response, use_container_width=True
        ):
            conversation.new_chat()
            st.rerun()

    _render_alpha_banner()

    suggestion = None
    if not conversation.messages:
        suggestion = _render_empty_state()
    for message in conversation.messages:
        render_message(message)
    render_error(conversation.error)

    prompt = st.chat_input("Type your message...", disabled=conversation.awaiting_response)
    text = prompt or suggestion
    if text:
        send_and_render(conversation, text)


if __name__ == "__main__":
    render_chat_page()
