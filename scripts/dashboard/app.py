"""
Streamlit dashboard entrypoint.

Run locally with `streamlit run scripts/dashboard/app.py` from the repository root.
"""

from __future__ import annotations

import streamlit as st

import scripts.dashboard.core as core
from cepa_chat.config import WIDGET
from scripts.dashboard.chat_state import discard_conversation
from scripts.dashboard.components.chat_window import render_chat_window


def main() -> None:
    """Render the sidebar navigation, the chat widget and the selected page."""
    st.set_page_config(page_title="CEPA", page_icon="💬", layout="wide")

    with st.sidebar:
        page = st.radio("Navigate", core.ALL_PAGES, key="nav_page")
        if page in core.WIDGET_PAGES:
            st.markdown("---")
            render_chat_window()
        else:
            # The widget conversation lives in memory only and ends on navigation
            discard_conversation(WIDGET)

    core.route_to_page(page)


if __name__ == "__main__":
    main()
