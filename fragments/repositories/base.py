"""Storage backend interface for fragment metadata and payloads."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


def validate_owner(owner_id: str) -> None:
    if not isinstance(owner_id, str) or not owner_id:
        raise TypeError(f"owner_id must be a non-empty string, got {owner_id!r}")


def validate_key(owner_id: str, fragment_id: str) -> None:
    """
    Reject keys that are not non-empty strings.

    Raises:
        TypeError: If owner_id or fragment_id is not a non-empty string
    """
    validate_owner(owner_id)
    if not isinstance(fragment_id, str) or not fragment_id:
        raise TypeError(f"fragment_id must be a non-empty string, got {fragment_id!r}")


class FragmentStore(ABC):
    """
    Key-value persistence for fragment metadata records and raw payloads.

    Metadata and payloads live under the same (owner_id, fragment_id) key
    but are written and deleted through independent calls. Implementations
    raise on I/O failure; they do not retry.
    """

    @abstractmethod
    def put_metadata(self, owner_id: str, fragment_id: str, record: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def get_metadata(self, owner_id: str, fragment_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def delete_metadata(self, owner_id: str, fragment_id: str) -> bool:
        """Delete a metadata record. Returns False if it did not exist."""

    @abstractmethod
    def list_metadata(self, owner_id: str) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def put_payload(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        ...

    @abstractmethod
    def get_payload(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        ...

    @abstractmethod
    def delete_payload(self, owner_id: str, fragment_id: str) -> bool:
        """Delete a payload. Returns False if it did not exist."""
