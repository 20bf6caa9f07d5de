# src/transport/__init__.py — v1
"""Controller to agent channels and per-file access."""
