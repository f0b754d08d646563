"""Dashboard core package."""

from .config import ALL_PAGES, PAGE_REGISTRY, WIDGET_PAGES
from .routing import route_to_page

__all__ = [
    "ALL_PAGES",
    "PAGE_REGISTRY",
    "WIDGET_PAGES",
    "route_to_page",
]
