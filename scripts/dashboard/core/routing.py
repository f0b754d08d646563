"""Dynamic routing for dashboard pages."""

from __future__ import annotations

import importlib
from typing import Callable

import streamlit as st

from cepa_chat.logging_utils import get_logger

from .config import PAGE_REGISTRY

logger = get_logger(__name__)


def resolve_page(page_name: str) -> Callable[[], None]:
    """Import the page module lazily and return its render function."""
    try:
        module_path, func_name = PAGE_REGISTRY[page_name]
    except KeyError:
        raise LookupError(f"Unknown page: {page_name}") from None
    module = importlib.import_module(module_path)
    render_func = getattr(module, func_name, None)
    if render_func is None:
        raise LookupError(f"{func_name} not found in {module_path}")
    return render_func


def route_to_page(page_name: str) -> None:
    try:
        render_func = resolve_page(page_name)
    except (LookupError, ImportError) as e:
        logger.error("[DASHBOARD] Cannot load page %r: %r", page_name, e)
        st.error(f"❌ Error loading page: {page_name}")
        with st.expander("Show full error details"):
            st.exception(e)
        return
    render_func()
