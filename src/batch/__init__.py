# src/batch/__init__.py — v1
"""Agent-side batch copy: classification and archive building."""
