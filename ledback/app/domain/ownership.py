"""
Owner identity value type.

Rows carry their owner as a plain string column (``user_email``); the
services pass an ``OwnerId`` around instead so "shared by everybody" is an
explicit value rather than a bare ``None``.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class OwnerId:
    """Opaque owner identity. ``OwnerId.GLOBAL`` marks shared rows."""
    value: Optional[str] = None

    @property
    def is_global(self) -> bool:
        return self.value is None

    @classmethod
    def parse(cls, raw: Optional[str]) -> "OwnerId":
        """Build from an untrusted header value; blank means global."""
        if raw is None or not raw.strip():
            return cls.GLOBAL
        return cls(raw.strip())

    def __str__(self) -> str:
        return self.value if self.value is not None else "<global>"


OwnerId.GLOBAL = OwnerId(None)
