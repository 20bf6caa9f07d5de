# src/sync/__init__.py — v1
"""Controller-side coordination of batch and fallback copies."""
