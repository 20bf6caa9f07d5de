# src/__init__.py — v1
"""Copy source files referenced by static-analysis findings into a result store."""
