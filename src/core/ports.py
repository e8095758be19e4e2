"""Ports (interfaces) used by the core.

Ports define the minimal contracts for configuration sources and host
integrations so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import List, Protocol

from core.config import GroupConfig
from core.models import MessageContext


class GroupConfigSource(Protocol):
    """Configuration collaborator that owns the word group definitions."""

    def group_names(self) -> List[str]:
        ...

    def get_group_config(self, name: str) -> GroupConfig:
        """Return the group config or raise ConfigurationError."""
        ...


class MessengerPort(Protocol):
    """Delivery of rendered response messages."""

    async def send_private(self, context: MessageContext, text: str) -> None:
        ...

    async def broadcast(self, context: MessageContext, text: str) -> None:
        ...


class CommandRunnerPort(Protocol):
    """Execution of rendered follow-up commands on the host."""

    async def run(self, command: str) -> None:
        ...


class PermissionPort(Protocol):
    def is_exempt(self, context: MessageContext) -> bool:
        ...
