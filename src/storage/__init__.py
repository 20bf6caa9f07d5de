# src/storage/__init__.py — v1
"""Result store: storage keys, layout and artifact access."""
