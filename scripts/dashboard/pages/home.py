"""Landing page; hosts the sidebar chat widget."""

import streamlit as st


def render_home_page():
    st.title("CEPA")
    st.markdown(
        "The Centre for Policy Analysis is a Uganda-based think tank working on parliamentary "
        "accountability, governance and public policy."
    )
    st.info(
        "Questions about our work? Open the **CEPA Assistant** from the sidebar, or use the "
        "full-page assistant for longer conversations."
    )
