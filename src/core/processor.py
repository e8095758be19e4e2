"""Core message processing pipeline.

This module is integration-agnostic. It only relies on ports for delivery,
command execution and permissions, so any chat host can drive it.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.models import Action, MessageContext
from core.placeholders import create_log_message, render_template
from core.ports import CommandRunnerPort, MessengerPort, PermissionPort
from core.rules_engine import MatchError
from core.word_manager import WordManager

LOGGER = logging.getLogger(__name__)


class MessageProcessor:
    """Orchestrates matching, response delivery and follow-up commands."""

    def __init__(
        self,
        word_manager: WordManager,
        messenger: MessengerPort,
        command_runner: CommandRunnerPort,
        permissions: PermissionPort,
    ) -> None:
        self._words = word_manager
        self._messenger = messenger
        self._command_runner = command_runner
        self._permissions = permissions

    async def handle(self, context: MessageContext) -> bool:
        """Process one chat message or command.

        Returns whether the original message may stay; False means the host
        should suppress it.
        """

        if self._permissions.is_exempt(context):
            return True

        if not context.text.strip():
            return True

        action = self._find_action(context)
        if action is None:
            return True

        return await self.apply(action, context)

    def _find_action(self, context: MessageContext) -> Optional[Action]:
        command_name = context.command_name
        try:
            # Commands without monitored words return before any scanning.
            if command_name is not None:
                return self._words.evaluate_command(command_name, context.text)
            return self._words.evaluate_text(context.text)
        except MatchError as exc:
            # Fail open: a broken rule must not block the message.
            LOGGER.warning("Could not process words. Action skipped: %s", exc)
            return None

    async def apply(self, action: Action, context: MessageContext) -> bool:
        """Send the response, run the commands, and report whether to keep the message."""

        response = render_template(action.message, context, action)
        if response.strip():
            try:
                if action.broadcast:
                    await self._messenger.broadcast(context, response)
                else:
                    await self._messenger.send_private(context, response)
            except Exception:
                LOGGER.exception("Failed to deliver response for group '%s'", action.group)

        LOGGER.info("%s", create_log_message(context, action, context.text, response))

        for command in action.commands:
            if not command or not command.strip():
                continue
            runnable = render_template(command, context, action)
            LOGGER.info("Invoking command: %s", runnable)
            try:
                await self._command_runner.run(runnable)
            except Exception:
                LOGGER.exception("Command failed: %s", runnable)

        return not action.prevent_send
