"""Dashboard page registry."""

from __future__ import annotations

# Mapping page name -> (module_path, function_name)
PAGE_REGISTRY = {
    "Home": ("scripts.dashboard.pages.home", "render_home_page"),
    "CEPA Assistant": ("scripts.dashboard.pages.chat", "render_chat_page"),
}

ALL_PAGES = list(PAGE_REGISTRY)

# Pages that show the sidebar chat widget (the full chat page has its own transcript)
WIDGET_PAGES = ["Home"]
