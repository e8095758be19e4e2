"""Application entry point for the chatmonitor watcher."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from telethon import events

from adapters.json_group_config import JsonGroupConfigSource
from adapters.permissions import ConfiguredExemptions, UserList
from adapters.telegram_host import TelegramCommandRunner, TelegramMessenger, suppress_message
from adapters.telegram_mapper import build_context
from core.models import MessageContext
from core.processor import MessageProcessor
from core.rules_engine import MatchError
from core.word_manager import WordManager

NAME = "CHATMONITOR"
FONT = "tarty-1"
ADMIN_COMMAND = "chatmonitor"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = [os.getenv(name) for name in redact_cfg.get("patterns", [])]
    return sorted({value for value in values if value}, key=len, reverse=True)


def _configure_logging(config: dict, project_root: str) -> None:
    config = config or {}
    if not config.get("enabled", True):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    formatter = _RedactingFormatter(
        _collect_redaction_values(config),
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/chatmonitor.log")
        if not os.path.isabs(path):
            path = os.path.join(project_root, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _group_source(settings) -> JsonGroupConfigSource:
    return JsonGroupConfigSource(settings.GROUPS_DIR, settings.GROUP_FILE_PREFIX)


def _is_admin_reload(context: MessageContext) -> bool:
    if context.command_name != ADMIN_COMMAND:
        return False
    parts = context.text.split()
    return len(parts) > 1 and parts[1].lower() == "reload"


def _run() -> None:
    import settings

    _print_banner()
    _configure_logging(settings.LOGGING, settings.PROJECT_ROOT)
    logger = logging.getLogger(__name__)

    logger.info("Initializing word lists...")
    source = _group_source(settings)
    word_manager = WordManager.from_source(source, skip_invalid_rules=settings.SKIP_INVALID_RULES)
    admins = UserList(settings.ADMIN_USERS)

    # Local imports keep `check` usable without Telegram credentials.
    from client import build_client
    from get_session import authorize

    client = build_client()
    client.loop.run_until_complete(client.connect())
    client.loop.run_until_complete(authorize(client))

    processor = MessageProcessor(
        word_manager=word_manager,
        messenger=TelegramMessenger(client),
        command_runner=TelegramCommandRunner(client, settings.COMMAND_CHAT),
        permissions=ConfiguredExemptions(settings.EXEMPT_USERS),
    )

    async def _reload(event, context: MessageContext) -> None:
        if not admins.matches(context):
            logger.info("Ignoring reload request from %s", context.sender_name)
            return
        snapshot = await asyncio.to_thread(word_manager.reload_from, source)
        await event.reply(
            f"ChatMonitor reloaded: {len(snapshot.rule_index.pattern_to_group)} patterns "
            f"in {len(snapshot.registry)} groups."
        )

    @client.on(events.NewMessage())
    async def handler(event) -> None:
        try:
            sender = await event.get_sender()
            context = build_context(event.message, sender)
            if _is_admin_reload(context):
                await _reload(event, context)
                return
            if settings.MONITORED_CHATS and context.chat_key not in settings.MONITORED_CHATS:
                return
            # Our own responses are sent from this account; never re-check them.
            if event.out:
                return
            allowed = await processor.handle(context)
            if not allowed:
                await suppress_message(client, context)
        except Exception:
            logger.exception("Error while processing message")

    client.start()
    logger.info("ChatMonitor is enabled. Listening for messages...")
    try:
        client.run_until_disconnected()
    finally:
        logger.info("ChatMonitor is disabled.")


def _check(text: Optional[str], command: Optional[str]) -> int:
    """Print the loaded rule index and optionally evaluate a sample text."""

    import settings

    _configure_logging(settings.LOGGING, settings.PROJECT_ROOT)
    console = Console()
    word_manager = WordManager.from_source(
        _group_source(settings),
        skip_invalid_rules=settings.SKIP_INVALID_RULES,
    )
    snapshot = word_manager.snapshot

    table = Table(title=f"Word groups in {settings.GROUPS_DIR}")
    table.add_column("Group")
    table.add_column("Pattern")
    table.add_column("Commands")
    for pattern, group in snapshot.rule_index.pattern_to_group.items():
        commands = sorted(
            name for name, patterns in snapshot.rule_index.command_to_patterns.items() if pattern in patterns
        )
        table.add_row(Text(group), Text(pattern), Text(", ".join(commands) or "-"))
    console.print(table)

    if text is None:
        return 0

    try:
        if command:
            action = word_manager.evaluate_command(command, text)
        else:
            action = word_manager.evaluate_text(text)
    except MatchError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        return 2

    if action is None:
        console.print("No match.")
        return 1
    console.print(
        f"Matched [bold]{escape(action.matched_text)}[/bold] (rule {escape(action.pattern)}) in group "
        f"[bold]{escape(action.group)}[/bold]; prevent_send={action.prevent_send}, "
        f"broadcast={action.broadcast}, commands={escape(str(list(action.commands)))}"
    )
    return 0


def _login() -> None:
    _print_banner()
    from client import build_client
    from get_session import authorize

    client = build_client()

    async def _run_login() -> None:
        await client.connect()
        await authorize(client)
        await client.disconnect()

    client.loop.run_until_complete(_run_login())


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="chatmonitor")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the watcher")
    subparsers.add_parser("login", help="Authorize the Telegram session")
    check_parser = subparsers.add_parser("check", help="Show loaded word groups and test a text")
    check_parser.add_argument("text", nargs="?", help="Text to evaluate")
    check_parser.add_argument("--command", dest="command_name", help="Evaluate TEXT as this command instead of chat text")

    args = parser.parse_args(argv)
    if args.command == "login":
        _login()
        return
    if args.command == "check":
        raise SystemExit(_check(args.text, args.command_name))
    _run()


if __name__ == "__main__":
    main()
