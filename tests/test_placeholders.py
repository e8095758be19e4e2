from __future__ import annotations

from adapters.permissions import UserList
from core.models import Action, MessageContext
from core.placeholders import create_log_message, render_template


def _context(sender_id: "int | None" = 42, username: "str | None" = "steve") -> MessageContext:
    return MessageContext(
        chat_key="@server",
        chat_id=-100123,
        message_id=1,
        sender_id=sender_id,
        sender_name="Steve",
        text="there is somebadw0rd in here.",
        sender_username=username,
    )


ACTION = Action(
    pattern="badw[0o]rd",
    matched_text="badw0rd",
    group="profanity",
    message="Please mind your language, %player%",
    prevent_send=True,
    broadcast=False,
    commands=("kick %player_id%",),
)


def test_render_template_replaces_known_placeholders() -> None:
    rendered = render_template("%player% (%player_id%) said %word% [%rule%/%group%] in %chat%", _context(), ACTION)
    assert rendered == "Steve (42) said badw0rd [badw[0o]rd/profanity] in @server"


def test_render_template_leaves_unknown_tokens_and_handles_empty() -> None:
    assert render_template("%unknown% stays", _context(), ACTION) == "%unknown% stays"
    assert render_template("", _context(), ACTION) == ""
    assert render_template("id=%player_id%", _context(sender_id=None), ACTION) == "id="


def test_create_log_message() -> None:
    line = create_log_message(_context(), ACTION, "there is somebadw0rd in here.", "Please mind your language, Steve")
    assert line.startswith("Steve triggered group 'profanity' with 'badw0rd' (rule badw[0o]rd)")
    assert line.endswith("| response: Please mind your language, Steve")
    assert "| response" not in create_log_message(_context(), ACTION, "x", "")


def test_user_list_matches_ids_and_usernames() -> None:
    users = UserList(["@Steve", "1001", "", "  "])
    assert len(users) == 2
    assert users.matches(_context(sender_id=7, username="STEVE"))
    assert users.matches(_context(sender_id=1001, username=None))
    assert not users.matches(_context(sender_id=7, username="alex"))
    assert not users.matches(_context(sender_id=None, username=None))
