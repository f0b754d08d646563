"""Streamlit front-end for the CEPA Assistant."""

# NOTE: Page render functions are imported lazily by core.routing.
# Don't add eager page imports here.
