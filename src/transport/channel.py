# src/transport/channel.py — v1
"""Channels carrying one batch request from controller to agent.

A channel is a message-passing boundary: a JSON ``SyncRequest`` goes
out, a JSON ``SyncResponse`` comes back. Any failure of the transport
itself surfaces as ``ChannelUnavailableError``; the coordinator then
switches to the per-file fallback.
"""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from typing import Callable, Sequence

from pydantic import ValidationError

from affectedfiles.batch.models import SyncRequest, SyncResponse

logger = logging.getLogger(__name__)

RequestHandler = Callable[[bytes], bytes]


class ChannelUnavailableError(Exception):
    """The remote batch operation cannot be invoked or did not answer."""


class BaseChannel(ABC):
    """Unified interface for controller → agent transports."""

    @abstractmethod
    def call(self, request: SyncRequest) -> SyncResponse:
        """Send ``request`` and wait for the agent's response.

        Raises:
            ChannelUnavailableError: If the round trip cannot be completed.
        """


class LocalChannel(BaseChannel):
    """In-process channel; still round-trips through the JSON wire format."""

    def __init__(self, handler: RequestHandler | None = None) -> None:
        """Initialize with an optional request handler.

        Args:
            handler: Agent entry point. Defaults to ``batch.copier.handle_request``.
        """
        if handler is None:
            from affectedfiles.batch.copier import handle_request

            handler = handle_request
        self._handler = handler

    def call(self, request: SyncRequest) -> SyncResponse:
        payload = request.model_dump_json().encode("utf-8")
        try:
            raw = self._handler(payload)
        except OSError as e:
            raise ChannelUnavailableError(f"Local agent call failed: {e}") from e
        return decode_response(raw)


class SubprocessChannel(BaseChannel):
    """Run an agent command (e.g. ``ssh build-01 affectedfiles agent``).

    The request is written to the command's stdin and one response is
    read from its stdout.
    """

    def __init__(self, command: Sequence[str], timeout_s: float | None = None) -> None:
        if not command:
            raise ValueError("Agent command must not be empty")
        self._command = list(command)
        self._timeout_s = timeout_s

    @property
    def command(self) -> list[str]:
        return list(self._command)

    def call(self, request: SyncRequest) -> SyncResponse:
        payload = request.model_dump_json().encode("utf-8")
        logger.debug("Invoking agent command %s", self._command[0])
        try:
            completed = subprocess.run(
                self._command,
                input=payload,
                capture_output=True,
                timeout=self._timeout_s,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise ChannelUnavailableError(f"Agent command timed out after {e.timeout}s") from e
        except OSError as e:
            raise ChannelUnavailableError(f"Cannot start agent command: {e}") from e

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            raise ChannelUnavailableError(
                f"Agent command exited with {completed.returncode}: {stderr[-500:]}"
            )
        return decode_response(completed.stdout)


def decode_response(raw: bytes | str) -> SyncResponse:
    """Parse an agent answer.

    Raises:
        ChannelUnavailableError: If the answer is not a valid response.
    """
    try:
        return SyncResponse.model_validate_json(raw)
    except ValidationError as e:
        raise ChannelUnavailableError(f"Malformed agent response: {e.error_count()} error(s)") from e
