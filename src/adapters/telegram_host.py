"""Telegram host adapters.

Implements the core MessengerPort and CommandRunnerPort on top of a Telethon
client, plus message suppression.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from core.models import MessageContext

LOGGER = logging.getLogger(__name__)


class TelegramMessenger:
    """Broadcasts reply in the chat; private responses go to the sender's DMs."""

    def __init__(self, client) -> None:
        self._client = client

    async def broadcast(self, context: MessageContext, text: str) -> None:
        await self._client.send_message(context.chat_id, text, reply_to=context.message_id)

    async def send_private(self, context: MessageContext, text: str) -> None:
        if context.sender_id is None:
            LOGGER.warning("No sender to notify in %s; response dropped", context.chat_key)
            return
        await self._client.send_message(context.sender_id, text)


class TelegramCommandRunner:
    """Posts rendered commands to the configured command chat.

    A moderation bot (or a human) listening in that chat carries them out.
    """

    def __init__(self, client, command_chat: Optional[Union[int, str]]) -> None:
        self._client = client
        self._command_chat = command_chat

    async def run(self, command: str) -> None:
        if self._command_chat is None:
            LOGGER.warning("No command_chat configured; skipping command: %s", command)
            return
        await self._client.send_message(self._command_chat, command)


async def suppress_message(client, context: MessageContext) -> None:
    """Delete the original message; Telegram has no way to cancel delivery."""

    await client.delete_messages(context.chat_id, [context.message_id])
    LOGGER.info("Suppressed message %s in %s", context.message_id, context.chat_key)
