# src/config/__init__.py — v1
"""Settings and source directory filtering."""
