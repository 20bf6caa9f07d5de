# src/core/__init__.py — v1
"""Domain models, containment predicate, diagnostics and errors."""
