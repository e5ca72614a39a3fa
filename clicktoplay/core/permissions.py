"""Per-origin plugin permissions."""

import logging
from enum import Enum
from typing import Dict, Mapping, Optional, Union
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


class Permission(str, Enum):
    """Permission recorded for an origin."""

    ALLOWED = "allowed"
    BLOCKED = "blocked"

    @classmethod
    def parse(cls, value: Union[str, "Permission"]) -> "Permission":
        """Parse a permission from user input.

        Accepts "allow"/"allowed"/"grant" and "block"/"blocked"/"deny".

        Raises:
            ValueError: If the value is not recognized
        """
        if isinstance(value, Permission):
            return value
        v = str(value).strip().lower()
        if v in {"allow", "allowed", "grant", "granted"}:
            return cls.ALLOWED
        if v in {"block", "blocked", "deny", "denied"}:
            return cls.BLOCKED
        raise ValueError(f"Unknown permission: {value}")


def normalize_origin(origin: str) -> str:
    """Reduce a URL or origin string to its origin.

    "HTTP://Mochi.Test:8888/plugin.html" becomes "http://mochi.test:8888".
    Strings without a scheme are only stripped and lowercased.
    """
    value = origin.strip()
    parts = urlsplit(value)
    if parts.scheme and parts.netloc:
        return f"{parts.scheme}://{parts.netloc}".lower()
    return value.lower()


class PermissionStore:
    """Holds origin permissions for the lifetime of a session."""

    def __init__(self, defaults: Optional[Mapping[str, Union[str, Permission]]] = None):
        """Initialize permission store.

        Args:
            defaults: Initial origin to permission mapping
        """
        self._entries: Dict[str, Permission] = {}
        for origin, permission in (defaults or {}).items():
            self.set(origin, Permission.parse(permission))

    def get(self, origin: str) -> Optional[Permission]:
        """Get permission for an origin.

        Returns:
            Permission or None if no entry exists
        """
        return self._entries.get(normalize_origin(origin))

    def set(self, origin: str, permission: Permission) -> None:
        key = normalize_origin(origin)
        previous = self._entries.get(key)
        self._entries[key] = permission
        if previous != permission:
            logger.info(f"Permission for {key} set to {permission.value}")

    def clear(self, origin: Optional[str] = None) -> None:
        """Remove one entry, or every entry when no origin is given."""
        if origin is None:
            self._entries.clear()
            logger.debug("Cleared all plugin permissions")
            return
        self._entries.pop(normalize_origin(origin), None)

    def items(self):
        return self._entries.items()

    def __contains__(self, origin: str) -> bool:
        return normalize_origin(origin) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
