# src/api/__init__.py — v1
"""Public API: copy affected files of a report, look up stored copies."""
