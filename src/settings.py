"""Static configuration for chatmonitor.

All user-editable settings (chats, exemptions, word group location, logging)
live in a single JSON file; the word groups themselves live in one JSON file
per group inside GROUPS_DIR.
"""

import json
import os

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# config.json sits at the project root unless CHATMONITOR_CONFIG points elsewhere.
CONFIG_PATH = os.getenv("CHATMONITOR_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(os.path.dirname(os.path.abspath(CONFIG_PATH)), path)


def _normalize_chats(raw_chats: list) -> set[str]:
    """Normalize monitored chats to the keys produced by the Telegram mapper."""

    chats: set[str] = set()
    for entry in raw_chats:
        key = str(entry).strip()
        if not key:
            continue
        if key.startswith("@"):
            chats.add(key.lower())
        elif key.lstrip("-").isdigit():
            chats.add(f"chat_id:{int(key)}")
        else:
            chats.add(key)
    return chats


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Word groups: <GROUPS_DIR>/<GROUP_FILE_PREFIX><name>.json
_words = _CONFIG.get("words", {})
GROUPS_DIR = _resolve_path(_words.get("directory", "wordgroups"))
GROUP_FILE_PREFIX = _words.get("file_prefix", "chatmonitor_wordgroup")
# When true, an invalid pattern is skipped with a warning instead of
# failing the whole lookup.
SKIP_INVALID_RULES = bool(_words.get("skip_invalid_rules", False))

# Empty means every chat the account can see is monitored.
MONITORED_CHATS = _normalize_chats(_CONFIG.get("chats", []))

# Senders (ids or @usernames) whose messages are never checked.
EXEMPT_USERS = list(_CONFIG.get("exempt_users", []))

# Senders allowed to run "/chatmonitor reload".
ADMIN_USERS = list(_CONFIG.get("admin_users", []))

# Where rendered follow-up commands are posted. None disables them.
COMMAND_CHAT = _CONFIG.get("command_chat")

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
