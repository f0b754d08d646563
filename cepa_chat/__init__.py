# cepa_chat/__init__.py

"""
Chat session client for the CEPA Assistant.

This package centralizes:
- config (API URL, session persistence, retention)
- the HTTP client for the chatbot API
- the conversation reconciler shared by the full-page and widget views.
"""

__all__ = ["config"]
