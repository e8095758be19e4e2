"""Pattern compilation and matching logic (core domain)."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

LOGGER = logging.getLogger(__name__)


class MatchError(Exception):
    """Base class for failures raised while matching text."""


class BadRuleError(MatchError):
    """A pattern could not be compiled as a regular expression."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Could not process rule ({pattern}): {reason}")
        self.pattern = pattern
        self.reason = reason


@dataclass(frozen=True)
class PatternMatch:
    """The first pattern that matched and the text it matched."""

    pattern: str
    matched_text: str
    start: int
    end: int


def compile_pattern(pattern: str) -> re.Pattern:
    """Compile one rule, turning regex syntax errors into BadRuleError."""

    try:
        return re.compile(pattern)
    except re.error as exc:
        raise BadRuleError(pattern, str(exc)) from exc


class PatternCache:
    """Compiled patterns for one rule snapshot.

    Entries are only ever added, and a pattern always compiles to the same
    result, so concurrent readers can share one cache without a lock.
    Invalid patterns are remembered and raise on every lookup.
    """

    def __init__(self) -> None:
        self._compiled: Dict[str, re.Pattern] = {}
        self._invalid: Dict[str, str] = {}

    def get(self, pattern: str) -> re.Pattern:
        compiled = self._compiled.get(pattern)
        if compiled is not None:
            return compiled
        reason = self._invalid.get(pattern)
        if reason is not None:
            raise BadRuleError(pattern, reason)
        try:
            compiled = compile_pattern(pattern)
        except BadRuleError as exc:
            self._invalid[pattern] = exc.reason
            raise
        return self._compiled.setdefault(pattern, compiled)

    def __len__(self) -> int:
        return len(self._compiled)


def _fold(text: str) -> Tuple[str, Optional[List[int]]]:
    """Lower-case the text and map each folded index back onto the original.

    The map is None when folding keeps every character in place.
    """

    lowered = text.lower()
    if len(lowered) == len(text):
        return lowered, None

    # Some characters fold to more than one (e.g. "İ"); fold them one by one.
    pieces: List[str] = []
    offsets: List[int] = []
    for index, char in enumerate(text):
        folded = char.lower()
        pieces.append(folded)
        offsets.extend([index] * len(folded))
    return "".join(pieces), offsets


def _original_span(text: str, offsets: Optional[List[int]], start: int, end: int) -> str:
    if offsets is None:
        return text[start:end]
    if start == end:
        return ""
    return text[offsets[start]:offsets[end - 1] + 1]


def match_patterns(
    text: str,
    patterns: Optional[Iterable[str]],
    cache: Optional[PatternCache] = None,
    skip_invalid: bool = False,
) -> Optional[PatternMatch]:
    """Return the first pattern that finds a match anywhere in the text.

    Matching logic:
    - The text is lower-cased once; patterns run case-sensitively against it.
    - Patterns are tried in the order given; the first search hit wins.
    - Every candidate is compiled before any search, so an invalid pattern
      raises BadRuleError no matter where it sits in the order. With
      skip_invalid set it is logged and left out instead.
    """

    if not patterns:
        return None

    compiled_patterns: List[Tuple[str, re.Pattern]] = []
    for pattern in patterns:
        try:
            compiled = cache.get(pattern) if cache is not None else compile_pattern(pattern)
        except BadRuleError as exc:
            if not skip_invalid:
                raise
            LOGGER.warning("Skipping invalid rule (%s): %s", exc.pattern, exc.reason)
            continue
        compiled_patterns.append((pattern, compiled))

    lowered, offsets = _fold(text)
    for pattern, compiled in compiled_patterns:
        found = compiled.search(lowered)
        if found is None:
            continue
        start, end = found.span()
        return PatternMatch(
            pattern=pattern,
            matched_text=_original_span(text, offsets, start, end),
            start=start,
            end=end,
        )

    return None
