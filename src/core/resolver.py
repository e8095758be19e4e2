"""Turn a pattern match into an Action (core domain)."""

from __future__ import annotations

import logging
from typing import Optional

from core.config import ConfigurationError
from core.models import Action
from core.rule_index import GroupRegistry, RuleIndex
from core.rules_engine import PatternMatch

LOGGER = logging.getLogger(__name__)


def resolve_action(
    match: PatternMatch,
    rule_index: RuleIndex,
    registry: GroupRegistry,
) -> Optional[Action]:
    """Produce an Action from the matched pattern's group settings.

    A missing or broken group degrades to no action so message processing
    keeps going. Message and command templates are copied verbatim.
    """

    group_name = rule_index.pattern_to_group.get(match.pattern)
    if group_name is None:
        LOGGER.debug("No group owns matched pattern %r", match.pattern)
        return None

    try:
        config = registry.get(group_name)
    except ConfigurationError as exc:
        LOGGER.warning(
            "Aborting generating action. Error in configuration file '%s': %s",
            exc.config_file_name,
            exc.message,
        )
        return None

    return Action(
        pattern=match.pattern,
        matched_text=match.matched_text,
        group=group_name,
        message=config.message,
        prevent_send=config.prevent_send,
        broadcast=config.broadcast,
        commands=tuple(config.run_commands),
    )
