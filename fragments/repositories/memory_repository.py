"""In-memory fragment store."""

import threading
from typing import Any, Dict, List, Optional

from common.logging_config import get_logger
from fragments.repositories.base import FragmentStore, validate_key, validate_owner

logger = get_logger(__name__)


class MemoryFragmentStore(FragmentStore):
    """
    Thread-safe in-memory store keyed by owner_id, then fragment_id.

    Records are copied on write and on read so callers never hold a
    reference into the store.
    """

    def __init__(self):
        self._metadata: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._payloads: Dict[str, Dict[str, bytes]] = {}
        self._lock = threading.RLock()

    def put_metadata(self, owner_id: str, fragment_id: str, record: Dict[str, Any]) -> None:
        validate_key(owner_id, fragment_id)
        with self._lock:
            self._metadata.setdefault(owner_id, {})[fragment_id] = dict(record)

    def get_metadata(self, owner_id: str, fragment_id: str) -> Optional[Dict[str, Any]]:
        validate_key(owner_id, fragment_id)
        with self._lock:
            record = self._metadata.get(owner_id, {}).get(fragment_id)
            return dict(record) if record is not None else None

    def delete_metadata(self, owner_id: str, fragment_id: str) -> bool:
        validate_key(owner_id, fragment_id)
        with self._lock:
            owner_records = self._metadata.get(owner_id, {})
            if fragment_id not in owner_records:
                return False
            del owner_records[fragment_id]
            if not owner_records:
                self._metadata.pop(owner_id, None)
            return True

    def list_metadata(self, owner_id: str) -> List[Dict[str, Any]]:
        validate_owner(owner_id)
        with self._lock:
            return [dict(record) for record in self._metadata.get(owner_id, {}).values()]

    def put_payload(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        validate_key(owner_id, fragment_id)
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Fragment data must be bytes, got {type(data).__name__}")
        with self._lock:
            self._payloads.setdefault(owner_id, {})[fragment_id] = bytes(data)

    def get_payload(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        validate_key(owner_id, fragment_id)
        with self._lock:
            return self._payloads.get(owner_id, {}).get(fragment_id)

    def delete_payload(self, owner_id: str, fragment_id: str) -> bool:
        validate_key(owner_id, fragment_id)
        with self._lock:
            owner_payloads = self._payloads.get(owner_id, {})
            if fragment_id not in owner_payloads:
                return False
            del owner_payloads[fragment_id]
            if not owner_payloads:
                self._payloads.pop(owner_id, None)
            return True

    def clear(self) -> None:
        """Drop every stored record and payload."""
        with self._lock:
            self._metadata.clear()
            self._payloads.clear()
        logger.debug("In-memory fragment store cleared")
