# src/logging/context.py — v2
"""Contextual logging support — attach run_id, tool_id and phase to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging — set per synchronization run.
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_tool_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "tool_id", default=None
)
_phase: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "phase", default=None
)


@dataclass(frozen=True)
class LogContext:
    """Immutable snapshot of current logging context."""

    run_id: str | None = None
    tool_id: str | None = None
    phase: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        run_id=_run_id.get(),
        tool_id=_tool_id.get(),
        phase=_phase.get(),
    )


def set_run_context(run_id: str, tool_id: str | None = None) -> None:
    """Set run-level context (called once per facade invocation)."""
    _run_id.set(run_id)
    _tool_id.set(tool_id)


def set_phase_context(phase: str | None) -> None:
    """Set the transfer phase ("batch" or "fallback")."""
    _phase.set(phase)


def clear_context() -> None:
    """Reset all context variables."""
    _run_id.set(None)
    _tool_id.set(None)
    _phase.set(None)
