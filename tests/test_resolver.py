from __future__ import annotations

import logging

import pytest

from core.config import GroupConfig
from core.resolver import resolve_action
from core.rule_index import GroupRegistry, build_rule_index
from core.rules_engine import PatternMatch

PROFANITY = GroupConfig(
    name="profanity",
    words=("badw[0o]rd",),
    include_commands=frozenset({"tell"}),
    message="Please mind your language, %player%",
    prevent_send=True,
    broadcast=True,
    run_commands=("warn %player%", "log %word%"),
)


def _match(pattern: str, matched_text: str = "BADW0RD") -> PatternMatch:
    return PatternMatch(pattern=pattern, matched_text=matched_text, start=0, end=len(matched_text))


def test_action_copies_group_settings() -> None:
    index = build_rule_index([PROFANITY])

    action = resolve_action(_match("badw[0o]rd"), index, GroupRegistry({"profanity": PROFANITY}))

    assert action is not None
    assert action.pattern == "badw[0o]rd"
    assert action.matched_text == "BADW0RD"
    assert action.group == "profanity"
    assert action.message == "Please mind your language, %player%"
    assert action.prevent_send is True
    assert action.broadcast is True
    assert action.commands == ("warn %player%", "log %word%")


def test_group_missing_from_registry_gives_no_action(caplog: pytest.LogCaptureFixture) -> None:
    index = build_rule_index([PROFANITY])

    with caplog.at_level(logging.WARNING, logger="core.resolver"):
        action = resolve_action(_match("badw[0o]rd"), index, GroupRegistry({}))

    assert action is None
    assert "Aborting generating action" in caplog.text
    assert "profanity" in caplog.text


def test_pattern_missing_from_index_gives_no_action() -> None:
    index = build_rule_index([PROFANITY])
    registry = GroupRegistry({"profanity": PROFANITY})

    assert resolve_action(_match("spoiler", "spoiler"), index, registry) is None
