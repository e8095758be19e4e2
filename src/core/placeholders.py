"""Placeholder substitution and log-line helpers."""

from __future__ import annotations

import re
from typing import Dict

from core.models import Action, MessageContext

PLACEHOLDER_RE = re.compile(r"%[a-z_]+%")


def placeholder_values(context: MessageContext, action: Action) -> Dict[str, str]:
    return {
        "%player%": context.sender_name,
        "%player_id%": "" if context.sender_id is None else str(context.sender_id),
        "%word%": action.matched_text,
        "%rule%": action.pattern,
        "%group%": action.group,
        "%chat%": context.chat_key,
    }


def render_template(template: str, context: MessageContext, action: Action) -> str:
    """Replace the known %placeholders% in a message or command template."""

    if not template:
        return ""
    values = placeholder_values(context, action)
    # Single pass: substituted values are never scanned again.
    return PLACEHOLDER_RE.sub(lambda found: values.get(found.group(0), found.group(0)), template)


def create_log_message(context: MessageContext, action: Action, original: str, response: str) -> str:
    """Return the single log line written for every applied action."""

    line = (
        f"{context.sender_name} triggered group '{action.group}' "
        f"with '{action.matched_text}' (rule {action.pattern}) in: {original}"
    )
    if response:
        line = f"{line} | response: {response}"
    return line
