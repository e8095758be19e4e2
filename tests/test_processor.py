from __future__ import annotations

import asyncio
import logging
from typing import Optional

import pytest

from adapters.permissions import ConfiguredExemptions
from core.config import GroupConfig
from core.models import MessageContext
from core.processor import MessageProcessor
from core.rule_index import GroupRegistry, build_rule_index
from core.word_manager import WordManager


class FakeMessenger:
    def __init__(self, fail: bool = False) -> None:
        self.private: list[tuple[MessageContext, str]] = []
        self.broadcasts: list[tuple[MessageContext, str]] = []
        self._fail = fail

    async def send_private(self, context: MessageContext, text: str) -> None:
        if self._fail:
            raise RuntimeError("chat unavailable")
        self.private.append((context, text))

    async def broadcast(self, context: MessageContext, text: str) -> None:
        if self._fail:
            raise RuntimeError("chat unavailable")
        self.broadcasts.append((context, text))


class FakeCommandRunner:
    def __init__(self, failing: "set[str] | None" = None) -> None:
        self.ran: list[str] = []
        self._failing = failing or set()

    async def run(self, command: str) -> None:
        if command in self._failing:
            raise RuntimeError("command rejected")
        self.ran.append(command)


def _manager(*groups: GroupConfig) -> WordManager:
    return WordManager(build_rule_index(groups), GroupRegistry({group.name: group for group in groups}))


def _context(
    text: str,
    *,
    command_name: Optional[str] = None,
    sender_id: int = 42,
    sender_username: Optional[str] = "steve",
) -> MessageContext:
    return MessageContext(
        chat_key="@server",
        chat_id=-100123,
        message_id=7,
        sender_id=sender_id,
        sender_name="Steve",
        text=text,
        command_name=command_name,
        sender_username=sender_username,
    )


PROFANITY = GroupConfig(
    name="profanity",
    words=("badw[0o]rd",),
    include_commands=frozenset({"tell"}),
    message="%player%, please mind your language (%word%)",
    prevent_send=True,
    broadcast=False,
    run_commands=("warn %player_id% %group%", "  ", "log %rule%"),
)

ANNOUNCE = GroupConfig(
    name="announce",
    words=("giveaway",),
    message="Everyone: giveaways are not allowed in %chat%",
    broadcast=True,
)


def _processor(manager: WordManager, messenger=None, runner=None, exempt=()) -> MessageProcessor:
    return MessageProcessor(
        word_manager=manager,
        messenger=messenger or FakeMessenger(),
        command_runner=runner or FakeCommandRunner(),
        permissions=ConfiguredExemptions(exempt),
    )


def test_private_response_commands_and_suppression() -> None:
    messenger = FakeMessenger()
    runner = FakeCommandRunner()
    processor = _processor(_manager(PROFANITY), messenger, runner)

    allowed = asyncio.run(processor.handle(_context("there is somebadw0rd in here.")))

    assert allowed is False
    assert [text for _, text in messenger.private] == ["Steve, please mind your language (badw0rd)"]
    assert messenger.broadcasts == []
    # Blank command templates are skipped.
    assert runner.ran == ["warn 42 profanity", "log badw[0o]rd"]


def test_broadcast_response_lets_message_through() -> None:
    messenger = FakeMessenger()
    processor = _processor(_manager(ANNOUNCE), messenger)

    allowed = asyncio.run(processor.handle(_context("Join my GIVEAWAY")))

    assert allowed is True
    assert [text for _, text in messenger.broadcasts] == ["Everyone: giveaways are not allowed in @server"]
    assert messenger.private == []


def test_no_match_sends_nothing() -> None:
    messenger = FakeMessenger()
    runner = FakeCommandRunner()
    processor = _processor(_manager(PROFANITY), messenger, runner)

    assert asyncio.run(processor.handle(_context("There are no matches here."))) is True
    assert messenger.private == []
    assert runner.ran == []


def test_exempt_senders_are_never_checked() -> None:
    messenger = FakeMessenger()
    processor = _processor(_manager(PROFANITY), messenger, exempt=["@Steve"])

    assert asyncio.run(processor.handle(_context("badw0rd"))) is True
    assert messenger.private == []

    processor = _processor(_manager(PROFANITY), messenger, exempt=[42])
    assert asyncio.run(processor.handle(_context("badw0rd", sender_username=None))) is True
    assert messenger.private == []


def test_commands_only_check_their_own_patterns() -> None:
    messenger = FakeMessenger()
    processor = _processor(_manager(PROFANITY, ANNOUNCE), messenger)

    assert asyncio.run(processor.handle(_context("/tell bob badw0rd", command_name="tell"))) is False
    # "me" has no monitored words, and "giveaway" is not registered for "tell".
    assert asyncio.run(processor.handle(_context("/me badw0rd", command_name="me"))) is True
    assert asyncio.run(processor.handle(_context("/tell bob giveaway", command_name="tell"))) is True
    assert len(messenger.private) == 1
    assert messenger.broadcasts == []


def test_bad_rule_lets_the_message_through() -> None:
    broken = GroupConfig(name="broken", words=("(invalid", "validword"), prevent_send=True, message="no")
    messenger = FakeMessenger()
    processor = _processor(_manager(broken), messenger)

    assert asyncio.run(processor.handle(_context("a validword here"))) is True
    assert messenger.private == []


def test_unregistered_commands_never_reach_broken_rules(caplog: pytest.LogCaptureFixture) -> None:
    broken = GroupConfig(name="broken", words=("(invalid",), include_commands=frozenset({"tell"}))
    processor = _processor(_manager(broken))

    with caplog.at_level(logging.WARNING, logger="core.processor"):
        assert asyncio.run(processor.handle(_context("/me (invalid", command_name="me"))) is True
    assert caplog.text == ""

    with caplog.at_level(logging.WARNING, logger="core.processor"):
        assert asyncio.run(processor.handle(_context("/tell bob hi", command_name="tell"))) is True
    assert "Could not process words" in caplog.text


def test_delivery_and_command_failures_do_not_stop_processing() -> None:
    runner = FakeCommandRunner(failing={"warn 42 profanity"})
    processor = _processor(_manager(PROFANITY), FakeMessenger(fail=True), runner)

    assert asyncio.run(processor.handle(_context("badw0rd"))) is False
    assert runner.ran == ["log badw[0o]rd"]


def test_blank_text_is_ignored() -> None:
    messenger = FakeMessenger()
    processor = _processor(_manager(PROFANITY), messenger)
    assert asyncio.run(processor.handle(_context("   "))) is True
    assert messenger.private == []
