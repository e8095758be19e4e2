"""Word manager facade (core domain).

The manager serves matches from one immutable snapshot at a time. Reload
builds a complete new snapshot and publishes it with a single reference
assignment, so a running match sees either the old rules or the new ones,
never a mix of both.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Iterable, Optional

from core.models import Action
from core.ports import GroupConfigSource
from core.resolver import resolve_action
from core.rule_index import GroupRegistry, RuleIndex, collect_words
from core.rules_engine import PatternCache, match_patterns

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class WordSnapshot:
    """One consistent rule set: index, registry and its compiled patterns."""

    rule_index: RuleIndex
    registry: GroupRegistry
    version: int = 0
    cache: PatternCache = field(default_factory=PatternCache, compare=False)
    relevant_commands: FrozenSet[str] = field(init=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "relevant_commands", frozenset(self.rule_index.command_to_patterns))


def empty_snapshot() -> WordSnapshot:
    return WordSnapshot(
        rule_index=RuleIndex(pattern_to_group=MappingProxyType({}), command_to_patterns=MappingProxyType({})),
        registry=GroupRegistry({}),
    )


class WordManager:
    """Public entry point for evaluating chat text and command text.

    Matching methods are safe to call from many threads at once. Only reload
    takes a lock, and only against other reloads.
    """

    def __init__(
        self,
        rule_index: Optional[RuleIndex] = None,
        registry: Optional[GroupRegistry] = None,
        skip_invalid_rules: bool = False,
    ) -> None:
        if rule_index is None:
            self._snapshot = empty_snapshot()
        else:
            if registry is None:
                registry = GroupRegistry({})
            self._snapshot = WordSnapshot(rule_index=rule_index, registry=registry)
        self._skip_invalid_rules = skip_invalid_rules
        self._reload_lock = threading.Lock()

    @classmethod
    def from_source(cls, source: GroupConfigSource, skip_invalid_rules: bool = False) -> "WordManager":
        rule_index, registry = collect_words(source)
        return cls(rule_index, registry, skip_invalid_rules=skip_invalid_rules)

    @property
    def snapshot(self) -> WordSnapshot:
        return self._snapshot

    def evaluate_text(self, text: str) -> Optional[Action]:
        """Match free chat text against every loaded pattern.

        Raises BadRuleError if a candidate pattern is not a valid regular
        expression.
        """

        snapshot = self._snapshot
        return self._evaluate(snapshot, text, snapshot.rule_index.patterns())

    def evaluate_command(self, command_name: str, full_text: str) -> Optional[Action]:
        """Match command text against the patterns registered for that command.

        Commands nobody registered patterns for return None without scanning.
        """

        snapshot = self._snapshot
        patterns = snapshot.rule_index.patterns_for_command(command_name)
        if not patterns:
            return None
        return self._evaluate(snapshot, full_text, patterns)

    def relevant_commands(self) -> FrozenSet[str]:
        """Commands that have at least one monitored pattern.

        Hosts use this as a cheap pre-check before handing command text over.
        """

        return self._snapshot.relevant_commands

    def reload(self, rule_index: RuleIndex, registry: GroupRegistry) -> WordSnapshot:
        """Publish a new rule set built by the caller."""

        with self._reload_lock:
            return self._publish(rule_index, registry)

    def reload_from(self, source: GroupConfigSource) -> WordSnapshot:
        """Rebuild the rule set from a configuration source and publish it."""

        with self._reload_lock:
            rule_index, registry = collect_words(source)
            return self._publish(rule_index, registry)

    def _publish(self, rule_index: RuleIndex, registry: GroupRegistry) -> WordSnapshot:
        snapshot = WordSnapshot(
            rule_index=rule_index,
            registry=registry,
            version=self._snapshot.version + 1,
        )
        self._snapshot = snapshot
        LOGGER.info(
            "Word lists reloaded (snapshot %s, %s patterns)",
            snapshot.version,
            len(rule_index.pattern_to_group),
        )
        return snapshot

    def _evaluate(self, snapshot: WordSnapshot, text: str, patterns: Iterable[str]) -> Optional[Action]:
        match = match_patterns(
            text,
            patterns,
            cache=snapshot.cache,
            skip_invalid=self._skip_invalid_rules,
        )
        if match is None:
            return None
        return resolve_action(match, snapshot.rule_index, snapshot.registry)
