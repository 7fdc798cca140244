"""
Lock Marker Value Object.

A marker exists in the shared lock directory only while a resource is held.
Its presence encodes exclusive ownership; absence means the resource is free.
The on-disk form is a small JSON document.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional
import json


@dataclass(frozen=True)
class LockMarker:
    """
    Exclusive ownership marker for a named resource.

    Attributes:
        resource_name: Logical name of the locked resource
        holder_token: Identifies the worker holding the lock
        created_at: When the marker was written
    """
    resource_name: str
    holder_token: str
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource_name": self.resource_name,
            "holder_token": self.holder_token,
            "created_at": self.created_at.isoformat(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, raw: str, resource_name: str) -> Optional["LockMarker"]:
        """
        Parse marker content.

        A marker can be observed between its exclusive create and its content
        write, so empty or partial content yields an anonymous marker instead
        of an error.
        """
        raw = (raw or "").strip()
        if not raw:
            return cls(resource_name=resource_name, holder_token="unknown")
        try:
            data = json.loads(raw)
            created_at = datetime.fromisoformat(data["created_at"])
            return cls(
                resource_name=data.get("resource_name", resource_name),
                holder_token=str(data.get("holder_token", "unknown")),
                created_at=created_at,
            )
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            return cls(resource_name=resource_name, holder_token=raw[:128])

    def age_seconds(self, now: Optional[datetime] = None) -> float:
        return ((now or datetime.now()) - self.created_at).total_seconds()
