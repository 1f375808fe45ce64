from datetime import datetime
from enum import IntEnum
from typing import Optional


class Rank(IntEnum):
    """Permission rank on a dashboard. Comparison follows the integer value."""

    VIEW = 1
    EDIT = 2
    ADMIN = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "Rank":
        try:
            return cls[label.upper()]
        except (KeyError, AttributeError):
            raise ValueError(f"Unknown permission level: {label!r}")


OWNER_LABEL = "owner"


def is_share_active(share: dict, now: datetime) -> bool:
    """A grant counts only while it has no expiry or expires in the future."""
    expires_at: Optional[datetime] = share.get("expires_at")
    return expires_at is None or expires_at > now
