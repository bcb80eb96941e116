"""
Counter model mirroring the backend's serialized counter record.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp as sent by the backend into an aware datetime."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        # fromisoformat only accepts a trailing 'Z' on Python 3.11+
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        dt = datetime.fromisoformat(text)
    else:
        raise TypeError(f"timestamp must be a string or datetime, got {type(value).__name__}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Counter:
    """A counter record as seen by the client.

    Attributes:
        id: Identifier assigned by the backend
        value: Current integer value (may be negative)
        created_at: When the counter was created
        updated_at: When the counter was last changed
    """
    id: int
    value: int
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        """Validate counter fields after initialization."""
        for name in ('id', 'value'):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int):
                raise TypeError(f"{name} must be an integer, got {type(v).__name__}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Counter':
        """Build a Counter from the backend's JSON representation."""
        try:
            return cls(
                id=data['id'],
                value=data['value'],
                created_at=parse_timestamp(data['created_at']),
                updated_at=parse_timestamp(data['updated_at']),
            )
        except KeyError as e:
            raise ValueError(f"counter payload missing field {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'value': self.value,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }

    def __str__(self) -> str:
        return f"Counter#{self.id}={self.value}"
