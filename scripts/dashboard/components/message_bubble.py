"""Message bubble, typing indicator and error banner for the chat views.

The ``*_html`` helpers are pure so they can be tested without a Streamlit
runtime; the ``render_*`` functions push them to the page.
"""

from __future__ import annotations

import html
from typing import Optional, Union

import streamlit as st

from cepa_chat.chat.chat_types import AssistantMessage, UserMessage, is_optimistic

BRAND_COLOR = "#800020"

_BUBBLE_STYLE = {
    "user": f"background-color: {BRAND_COLOR}; color: white; margin-left: auto;",
    "assistant": "background-color: white; color: #1f2937; border: 1px solid #e5e7eb; margin-right: auto;",
}

_TYPING_CSS = """
<style>
  @keyframes cepa-bounce {
    0%, 80%, 100% { transform: translateY(0); }
    40% { transform: translateY(-6px); }
  }
  .cepa-dot {
    width: 8px; height: 8px; border-radius: 50%;
    background: #9ca3af; display: inline-block; margin-right: 6px;
    animation: cepa-bounce 1s infinite;
  }
</style>
"""


def format_confidence(confidence: Optional[float]) -> Optional[str]:
    """'Confidence: 87%' or None when there is no (non-zero) score."""
    if not confidence:
        return None
    return f"Confidence: {round(confidence * 100)}%"


def citation_html(message: AssistantMessage) -> str:
    if not message.source_document_name:
        return ""
    parts = [
        '<div style="margin-top: 10px; padding-top: 8px; border-top: 1px solid #e5e7eb; font-size: 12px;">',
        f'<div style="color: #6b7280;"><strong>Source:</strong> {html.escape(message.source_document_name)}</div>',
    ]
    if message.source_document_url:
        url = html.escape(message.source_document_url, quote=True)
        parts.append(
            f'<a href="{url}" target="_blank" rel="noopener noreferrer" '
            f'style="color: {BRAND_COLOR};">View document</a>'
        )
    confidence = format_confidence(message.confidence)
    if confidence:
        parts.append(f'<div style="color: #9ca3af;">{confidence}</div>')
    parts.append("</div>")
    return "".join(parts)


def bubble_html(message: Union[UserMessage, AssistantMessage]) -> str:
    style = _BUBBLE_STYLE[message.message_type]
    opacity = " opacity: 0.8;" if is_optimistic(message) else ""
    body = html.escape(message.content)
    footer = citation_html(message) if isinstance(message, AssistantMessage) else ""
    return (
        f'<div style="display: flex; margin: 6px 0;">'
        f'<div style="max-width: 75%; padding: 12px 14px; border-radius: 10px; '
        f'white-space: pre-wrap; line-height: 1.5; {style}{opacity}">'
        f"{body}{footer}</div></div>"
    )


def typing_indicator_html() -> str:
    dots = "".join(
        f'<span class="cepa-dot" style="animation-delay: {delay}ms;"></span>' for delay in (0, 150, 300)
    )
    return (
        f"{_TYPING_CSS}"
        '<div style="display: inline-block; padding: 12px 14px; border-radius: 10px; '
        f'background: white; border: 1px solid #e5e7eb;">{dots}</div>'
    )


def render_message(message: Union[UserMessage, AssistantMessage]) -> None:
    st.markdown(bubble_html(message), unsafe_allow_html=True)


def render_typing_indicator() -> None:
    st.markdown(typing_indicator_html(), unsafe_allow_html=True)


def render_error(error: Optional[str]) -> None:
    if error:
        st.error(f"**Error**\n\n{error}")
