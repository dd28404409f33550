"""SQLite-backed fragment store."""

from typing import Any, Dict, List, Optional

from common.logging_config import get_logger
from fragments.database import get_db_connection
from fragments.repositories.base import FragmentStore, validate_key, validate_owner

logger = get_logger(__name__)


def _row_to_record(row) -> Dict[str, Any]:
    return {
        "id": row["fragment_id"],
        "ownerId": row["owner_id"],
        "created": row["created"],
        "updated": row["updated"],
        "type": row["type"],
        "size": row["size"],
    }


class SqliteFragmentStore(FragmentStore):
    """
    Fragment store persisting metadata in the fragments table and
    payloads in the fragment_data table.

    Each method opens its own connection and commits on its own, so a
    metadata write and a payload write are never one transaction.
    """

    def put_metadata(self, owner_id: str, fragment_id: str, record: Dict[str, Any]) -> None:
        validate_key(owner_id, fragment_id)
        logger.debug(f"Writing fragment metadata [owner_id={owner_id}] [fragment_id={fragment_id}]")

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO fragments (owner_id, fragment_id, type, size, created, updated)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(owner_id, fragment_id) DO UPDATE SET
                    type = excluded.type,
                    size = excluded.size,
                    created = excluded.created,
                    updated = excluded.updated
                """,
                (owner_id, fragment_id, record["type"], record["size"], record["created"], record["updated"])
            )
            conn.commit()

    def get_metadata(self, owner_id: str, fragment_id: str) -> Optional[Dict[str, Any]]:
        validate_key(owner_id, fragment_id)

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT owner_id, fragment_id, type, size, created, updated
                FROM fragments WHERE owner_id = ? AND fragment_id = ?
                """,
                (owner_id, fragment_id)
            )
            row = cursor.fetchone()

            if row is None:
                return None

            return _row_to_record(row)

    def delete_metadata(self, owner_id: str, fragment_id: str) -> bool:
        validate_key(owner_id, fragment_id)

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM fragments WHERE owner_id = ? AND fragment_id = ?",
                (owner_id, fragment_id)
            )
            conn.commit()
            return cursor.rowcount > 0

    def list_metadata(self, owner_id: str) -> List[Dict[str, Any]]:
        validate_owner(owner_id)

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT owner_id, fragment_id, type, size, created, updated
                FROM fragments WHERE owner_id = ?
                ORDER BY created
                """,
                (owner_id,)
            )
            return [_row_to_record(row) for row in cursor.fetchall()]

    def put_payload(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        validate_key(owner_id, fragment_id)
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Fragment data must be bytes, got {type(data).__name__}")
        logger.debug(f"Writing fragment data [owner_id={owner_id}] [fragment_id={fragment_id}] [size={len(data)}]")

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO fragment_data (owner_id, fragment_id, data)
                VALUES (?, ?, ?)
                ON CONFLICT(owner_id, fragment_id) DO UPDATE SET data = excluded.data
                """,
                (owner_id, fragment_id, bytes(data))
            )
            conn.commit()

    def get_payload(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        validate_key(owner_id, fragment_id)

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT data FROM fragment_data WHERE owner_id = ? AND fragment_id = ?",
                (owner_id, fragment_id)
            )
            row = cursor.fetchone()

            if row is None:
                return None

            return bytes(row["data"])

    def delete_payload(self, owner_id: str, fragment_id: str) -> bool:
        validate_key(owner_id, fragment_id)

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM fragment_data WHERE owner_id = ? AND fragment_id = ?",
                (owner_id, fragment_id)
            )
            conn.commit()
            return cursor.rowcount > 0
