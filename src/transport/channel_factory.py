# src/transport/channel_factory.py — v1
"""Factory: instantiate the agent channel from configuration."""

from __future__ import annotations

from affectedfiles.config.settings import Settings
from affectedfiles.transport.channel import BaseChannel, LocalChannel, SubprocessChannel


def create_channel(settings: Settings) -> BaseChannel:
    """Create the channel to the agent holding the workspace.

    Args:
        settings: Application settings (AGENT_COMMAND, CHANNEL_TIMEOUT_S).

    Returns:
        ``SubprocessChannel`` when an agent command is configured,
        otherwise an in-process ``LocalChannel`` (workspace is local).
    """
    if settings.agent_command:
        return SubprocessChannel(
            settings.agent_command_list, timeout_s=settings.channel_timeout_s,
        )
    return LocalChannel()
