"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple


class ConfigurationError(Exception):
    """Raised when a group configuration cannot be loaded or is malformed."""

    def __init__(self, config_file_name: str, message: str) -> None:
        super().__init__(message)
        self.config_file_name = config_file_name
        self.message = message


@dataclass(frozen=True)
class GroupConfig:
    """One named word group and its shared response settings."""

    name: str
    words: Tuple[str, ...] = ()
    include_commands: FrozenSet[str] = field(default_factory=frozenset)
    message: str = ""
    prevent_send: bool = False
    broadcast: bool = False
    run_commands: Tuple[str, ...] = ()
    source: Optional[str] = None
