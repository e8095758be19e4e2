"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the core pipeline.
"""

from __future__ import annotations

from typing import Optional

from telethon.tl.custom import Message

from core.models import MessageContext

COMMAND_PREFIX = "/"


def chat_key_from_message(message: Message) -> str:
    """Normalize a chat key using a single rule enforced across the app."""

    chat = getattr(message, "chat", None)
    username = getattr(chat, "username", None)

    if isinstance(username, str) and username:
        return f"@{username.lower()}"

    # Fallback: always stable and universal
    return f"chat_id:{message.chat_id}"


def parse_command_name(text: str) -> Optional[str]:
    """Return the command name for "/name@bot args" text, or None for chat text."""

    stripped = text.lstrip()
    if not stripped.startswith(COMMAND_PREFIX):
        return None
    head = stripped.split(maxsplit=1)[0][len(COMMAND_PREFIX) :]
    # Group chats address bots as /command@botname.
    name = head.split("@", 1)[0]
    return name.lower() or None


def _sender_name(sender) -> str:
    if sender is None:
        return "unknown"
    first = getattr(sender, "first_name", None)
    last = getattr(sender, "last_name", None)
    if first or last:
        return " ".join(part for part in [first, last] if part)
    title = getattr(sender, "title", None)
    if title:
        return str(title)
    username = getattr(sender, "username", None)
    if username:
        return f"@{username}"
    return str(getattr(sender, "id", "unknown"))


def build_context(message: Message, sender=None) -> MessageContext:
    """Build a core MessageContext from a Telethon Message.

    The sender entity is resolved by the caller (it needs an await) and
    falls back to the message's cached sender.
    """

    if sender is None:
        sender = getattr(message, "sender", None)
    text = message.raw_text or ""
    username = getattr(sender, "username", None)

    return MessageContext(
        chat_key=chat_key_from_message(message),
        chat_id=message.chat_id,
        message_id=message.id,
        sender_id=getattr(message, "sender_id", None),
        sender_name=_sender_name(sender),
        text=text,
        command_name=parse_command_name(text),
        sender_username=username if isinstance(username, str) and username else None,
    )
