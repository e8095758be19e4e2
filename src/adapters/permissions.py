"""Permission adapters backed by configured user lists."""

from __future__ import annotations

from typing import Iterable, Optional

from core.models import MessageContext


def _normalize_user(value: object) -> Optional[str]:
    text = str(value).strip().lower()
    if not text:
        return None
    if text.lstrip("-").isdigit():
        return str(int(text))
    return text if text.startswith("@") else f"@{text}"


class UserList:
    """A set of senders given by numeric id or @username."""

    def __init__(self, users: Iterable[object]) -> None:
        self._users = {key for key in (_normalize_user(user) for user in users) if key}

    def matches(self, context: MessageContext) -> bool:
        if context.sender_id is not None and str(context.sender_id) in self._users:
            return True
        if context.sender_username:
            return _normalize_user(context.sender_username) in self._users
        return False

    def __len__(self) -> int:
        return len(self._users)


class ConfiguredExemptions(UserList):
    """PermissionPort: listed senders are never checked."""

    def is_exempt(self, context: MessageContext) -> bool:
        return self.matches(context)
