"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class MessageContext:
    """Minimal message context used by the processor."""

    chat_key: str
    chat_id: int
    message_id: int
    sender_id: Optional[int]
    sender_name: str
    text: str
    command_name: Optional[str] = None
    sender_username: Optional[str] = None


@dataclass(frozen=True)
class Action:
    """What to do about one matched pattern.

    The message and commands are still templates here; placeholders are
    rendered by whoever applies the action.
    """

    pattern: str
    matched_text: str
    group: str
    message: str
    prevent_send: bool
    broadcast: bool
    commands: Tuple[str, ...]
