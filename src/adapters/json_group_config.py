"""JSON word group configuration adapter.

Implements the core GroupConfigSource with one JSON file per group:
``<directory>/<prefix><group>.json``.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, FrozenSet, List

from core.config import ConfigurationError, GroupConfig

LOGGER = logging.getLogger(__name__)

DEFAULT_PREFIX = "chatmonitor_wordgroup"
FILE_SUFFIX = ".json"


def _string_list(data: dict, key: str, file_name: str) -> List[str]:
    value = data.get(key, [])
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) or item is None for item in value):
        raise ConfigurationError(file_name, f"'{key}' must be a list of strings")
    return [item for item in value if item is not None]


def _command_names(data: dict, file_name: str) -> FrozenSet[str]:
    # Hosts hand over command names lower-cased and without the leading "/".
    names = (item.strip().lstrip("/").lower() for item in _string_list(data, "includeCommands", file_name))
    return frozenset(name for name in names if name)


def _flag(data: dict, key: str, file_name: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise ConfigurationError(file_name, f"'{key}' must be true or false")
    return value


def parse_group_config(name: str, data: Any, file_name: str) -> GroupConfig:
    """Validate raw group data and apply defaults."""

    if not isinstance(data, dict):
        raise ConfigurationError(file_name, "group file must contain a JSON object")

    message = data.get("message", "")
    if message is None:
        message = ""
    if not isinstance(message, str):
        raise ConfigurationError(file_name, "'message' must be a string")

    return GroupConfig(
        name=name,
        words=tuple(_string_list(data, "words", file_name)),
        include_commands=_command_names(data, file_name),
        message=message,
        prevent_send=_flag(data, "preventSend", file_name),
        broadcast=_flag(data, "broadcast", file_name),
        run_commands=tuple(_string_list(data, "runCommands", file_name)),
        source=file_name,
    )


class JsonGroupConfigSource:
    """Reads word groups from a directory of JSON files."""

    def __init__(self, directory: str, prefix: str = DEFAULT_PREFIX) -> None:
        self._directory = directory
        self._prefix = prefix

    def _file_name(self, name: str) -> str:
        return f"{self._prefix}{name}{FILE_SUFFIX}"

    def group_names(self) -> List[str]:
        """Group names in file-name order, which is also the matching order."""

        if not os.path.isdir(self._directory):
            LOGGER.warning("Word group directory not found: %s", self._directory)
            return []

        names: List[str] = []
        for entry in sorted(os.listdir(self._directory)):
            if not entry.startswith(self._prefix) or not entry.endswith(FILE_SUFFIX):
                continue
            name = entry[len(self._prefix) : -len(FILE_SUFFIX)]
            if name:
                names.append(name)
        return names

    def get_group_config(self, name: str) -> GroupConfig:
        file_name = self._file_name(name)
        path = os.path.join(self._directory, file_name)
        try:
            with open(path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError as exc:
            raise ConfigurationError(file_name, "file not found") from exc
        except json.JSONDecodeError as exc:
            raise ConfigurationError(file_name, f"invalid JSON: {exc}") from exc
        except OSError as exc:
            raise ConfigurationError(file_name, f"could not read file: {exc}") from exc
        return parse_group_config(name, data, file_name)
