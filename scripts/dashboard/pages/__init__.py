"""
Page modules for the Streamlit dashboard.

NOTE: This package uses LAZY IMPORTS. Each page is imported only when
selected in the sidebar (see scripts.dashboard.core.routing).
"""
