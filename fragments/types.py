"""Fragment entity and its invariants."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from fragments import media_types
from fragments.exceptions import UnsupportedMediaTypeError, ValidationError
from fragments.utils import generate_uuid, get_current_timestamp


@dataclass
class Fragment:
    """
    Metadata for a single owner-scoped fragment.

    The owner and type are required; the type's base must be registered.
    Timestamps are ISO-8601 strings with millisecond precision.
    """
    owner_id: str
    type: str
    size: int = 0
    id: str = field(default_factory=generate_uuid)
    created: str = ""
    updated: str = ""

    def __post_init__(self):
        if not self.owner_id or not self.type:
            raise ValidationError("Owner Id and type are required")

        if not media_types.is_supported(self.type):
            raise UnsupportedMediaTypeError(f"Invalid Type: {self.type}")

        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size < 0:
            raise ValidationError("Size should be a number which is >= 0")

        if not self.id:
            self.id = generate_uuid()

        now = get_current_timestamp()
        self.created = self.created or now
        self.updated = self.updated or now

    @property
    def mime_type(self) -> str:
        """Base type without parameters: "text/html; charset=utf-8" -> "text/html"."""
        return media_types.base_type(self.type)

    @property
    def formats(self) -> List[str]:
        """Base types this fragment can be converted into."""
        return media_types.formats_for(self.type)

    def touch(self) -> None:
        self.updated = get_current_timestamp()

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "ownerId": self.owner_id,
            "created": self.created,
            "updated": self.updated,
            "type": self.type,
            "size": self.size,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Fragment":
        return cls(
            id=record["id"],
            owner_id=record["ownerId"],
            created=record["created"],
            updated=record["updated"],
            type=record["type"],
            size=record["size"],
        )
