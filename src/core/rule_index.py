"""Rule index collection (core domain).

Builds the pattern -> group and command -> patterns lookups from a
configuration source. Every load produces brand new read-only values; nothing
here is mutated after it has been built.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from core.config import ConfigurationError, GroupConfig
from core.ports import GroupConfigSource

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleIndex:
    """Derived lookups rebuilt on every configuration load."""

    pattern_to_group: Mapping[str, str]
    command_to_patterns: Mapping[str, Tuple[str, ...]]

    def patterns(self) -> Tuple[str, ...]:
        return tuple(self.pattern_to_group)

    def patterns_for_command(self, command_name: str) -> Tuple[str, ...]:
        return self.command_to_patterns.get(command_name, ())


class GroupRegistry:
    """Read-only lookup of group configs captured at build time."""

    def __init__(self, groups: Mapping[str, GroupConfig]) -> None:
        self._groups = MappingProxyType(dict(groups))

    def get(self, name: str) -> GroupConfig:
        group = self._groups.get(name)
        if group is None:
            raise ConfigurationError(name, f"Unknown word group '{name}'")
        return group

    def names(self) -> Tuple[str, ...]:
        return tuple(self._groups)

    def __contains__(self, name: object) -> bool:
        return name in self._groups

    def __len__(self) -> int:
        return len(self._groups)


def _is_blank(command: Optional[str]) -> bool:
    return command is None or not str(command).strip()


def build_rule_index(groups: Iterable[GroupConfig]) -> RuleIndex:
    """Collect the lookups for already loaded groups, in the given order.

    A pattern declared by more than one group belongs to the last one.
    """

    groups = list(groups)
    pattern_to_group: Dict[str, str] = {}
    command_to_patterns: Dict[str, Dict[str, None]] = {}

    for group in groups:
        for pattern in group.words:
            previous = pattern_to_group.get(pattern)
            if previous is not None and previous != group.name:
                LOGGER.warning(
                    "Pattern %r is declared by groups '%s' and '%s'; using '%s'",
                    pattern,
                    previous,
                    group.name,
                    group.name,
                )
            pattern_to_group[pattern] = group.name

    # Command subsets are computed after ownership is final so a pattern
    # taken over by a later group never stays listed for the earlier group's
    # commands.
    for group in groups:
        commands = [command for command in group.include_commands if not _is_blank(command)]
        for pattern in group.words:
            if pattern_to_group.get(pattern) != group.name:
                continue
            for command in sorted(commands):
                command_to_patterns.setdefault(command, {})[pattern] = None

    return RuleIndex(
        pattern_to_group=MappingProxyType(pattern_to_group),
        command_to_patterns=MappingProxyType(
            {command: tuple(patterns) for command, patterns in command_to_patterns.items()}
        ),
    )


def collect_words(source: GroupConfigSource) -> Tuple[RuleIndex, GroupRegistry]:
    """Load every group from the source and build a fresh index + registry.

    A group whose configuration fails to load is logged and skipped; the
    rest of the groups still load.
    """

    loaded: List[GroupConfig] = []
    for name in source.group_names():
        try:
            loaded.append(source.get_group_config(name))
        except ConfigurationError as exc:
            LOGGER.warning(
                "Word group loading defaults. Error in configuration file '%s': %s",
                exc.config_file_name,
                exc.message,
            )

    registry = GroupRegistry({group.name: group for group in loaded})
    index = build_rule_index(loaded)
    LOGGER.info(
        "Collected %s patterns from %s groups (%s monitored commands)",
        len(index.pattern_to_group),
        len(registry),
        len(index.command_to_patterns),
    )
    return index, registry
