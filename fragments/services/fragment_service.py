"""Fragment service for lifecycle business logic."""

from typing import Any, Callable, List, Optional, Union

from common.logging_config import get_logger
from fragments import media_types
from fragments.conversion import ConversionResult, convert_fragment_data
from fragments.exceptions import (
    FragmentNotFoundError,
    FragmentsException,
    StorageError,
    TypeImmutableError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from fragments.repositories import FragmentStore
from fragments.types import Fragment
from fragments.validation import validate_fragment_data

logger = get_logger(__name__)


class FragmentService:
    """
    Create, read, update and delete owner-scoped fragments.

    Every write touches the store twice: metadata first, then payload.
    There is no rollback between the two calls, so a failure after the
    metadata write leaves a record whose payload is missing; the reverse
    (a payload without metadata) is never produced.
    """

    def __init__(self, store: Optional[FragmentStore] = None):
        if store is None:
            from fragments.service_locator import get_fragment_store
            store = get_fragment_store()
        self.store = store

    @staticmethod
    def _check_owner(owner_id: str) -> None:
        if not isinstance(owner_id, str) or not owner_id:
            raise ValidationError("Owner Id is required")

    def _check_key(self, owner_id: str, fragment_id: str) -> None:
        self._check_owner(owner_id)
        if not isinstance(fragment_id, str) or not fragment_id:
            raise ValidationError("Fragment Id is required")

    def _call_store(self, operation: str, func: Callable, *args) -> Any:
        try:
            return func(*args)
        except FragmentsException:
            raise
        except Exception as e:
            logger.error(f"Storage call failed during {operation}: {e}", exc_info=True)
            raise StorageError(f"Unable to {operation}: {e}") from e

    def create_fragment(self, owner_id: str, fragment_type: str, data: bytes) -> Fragment:
        """
        Validate and persist a new fragment.

        Raises:
            ValidationError: If owner or type is missing, or data is empty
            UnsupportedMediaTypeError: If the type is unsupported or data fails validation
            StorageError: If either storage call fails
        """
        if not data:
            raise ValidationError("Fragment data cannot be empty")

        fragment = Fragment(owner_id=owner_id, type=fragment_type, size=len(data))
        validate_fragment_data(data, fragment.type)

        self._save(fragment, data)
        logger.info(
            f"Fragment created [owner_id={owner_id}] [fragment_id={fragment.id}] "
            f"[type={fragment.type}] [size={fragment.size}]"
        )
        return fragment

    def list_fragments(self, owner_id: str, expand: bool = False) -> Union[List[str], List[Fragment]]:
        """
        List an owner's fragments as ids, or as full metadata when expand is set.

        Unknown owners get an empty list.
        """
        self._check_owner(owner_id)
        records = self._call_store("list fragments", self.store.list_metadata, owner_id)
        fragments = [Fragment.from_record(record) for record in records]
        logger.debug(f"Listed {len(fragments)} fragment(s) [owner_id={owner_id}] [expand={expand}]")

        if expand:
            return fragments
        return [fragment.id for fragment in fragments]

    def get_fragment(self, owner_id: str, fragment_id: str) -> Fragment:
        """
        Load fragment metadata.

        Raises:
            FragmentNotFoundError: If the owner has no fragment with this id
        """
        self._check_key(owner_id, fragment_id)
        record = self._call_store("read fragment metadata", self.store.get_metadata, owner_id, fragment_id)
        if record is None:
            raise FragmentNotFoundError(f"Fragment {fragment_id} does not exist")
        return Fragment.from_record(record)

    def get_fragment_data(self, fragment: Fragment) -> bytes:
        """
        Load the payload of a fragment located with get_fragment.

        Raises:
            FragmentNotFoundError: If the payload is missing
        """
        data = self._call_store("read fragment data", self.store.get_payload, fragment.owner_id, fragment.id)
        if data is None:
            logger.error(f"Fragment data missing for existing metadata [fragment_id={fragment.id}]")
            raise FragmentNotFoundError(f"Data for fragment {fragment.id} does not exist")
        return data

    def read_fragment(
        self,
        owner_id: str,
        fragment_id: str,
        extension: Optional[str] = None
    ) -> tuple[Fragment, ConversionResult]:
        """
        Load a fragment's data, converted to the type named by extension if any.

        Raises:
            FragmentNotFoundError: If the fragment does not exist
            ConversionNotSupportedError: If the extension's type is not a legal target
            ConversionNotImplementedError: If the legal target has no transform
        """
        fragment = self.get_fragment(owner_id, fragment_id)
        data = self.get_fragment_data(fragment)
        result = convert_fragment_data(data, fragment.type, extension)

        if result.converted:
            logger.info(
                f"Fragment converted [fragment_id={fragment_id}] "
                f"[from={fragment.mime_type}] [to={result.content_type}]"
            )
        return fragment, result

    def update_fragment(self, owner_id: str, fragment_id: str, fragment_type: str, data: bytes) -> Fragment:
        """
        Replace a fragment's data. The type cannot change.

        Raises:
            ValidationError: If data is empty
            FragmentNotFoundError: If the fragment does not exist
            UnsupportedMediaTypeError: If the type is unsupported or data fails validation
            TypeImmutableError: If the declared type differs from the stored type
            StorageError: If either storage call fails
        """
        if not data:
            raise ValidationError("Fragment data cannot be empty")

        fragment = self.get_fragment(owner_id, fragment_id)

        if not media_types.is_supported(fragment_type):
            raise UnsupportedMediaTypeError(f"Invalid Type: {fragment_type}")

        validate_fragment_data(data, fragment_type)

        if media_types.base_type(fragment_type) != fragment.mime_type:
            logger.warning(
                f"Rejected type change [fragment_id={fragment_id}] "
                f"[stored={fragment.mime_type}] [declared={fragment_type}]"
            )
            raise TypeImmutableError("A fragment's type can not be changed after it is created")

        fragment.size = len(data)
        self._save(fragment, data)
        logger.info(f"Fragment updated [owner_id={owner_id}] [fragment_id={fragment_id}] [size={fragment.size}]")
        return fragment

    def delete_fragment(self, owner_id: str, fragment_id: str) -> None:
        """
        Delete a fragment's metadata and data.

        Raises:
            FragmentNotFoundError: If the fragment does not exist
        """
        self.get_fragment(owner_id, fragment_id)

        self._call_store("delete fragment metadata", self.store.delete_metadata, owner_id, fragment_id)
        self._call_store("delete fragment data", self.store.delete_payload, owner_id, fragment_id)
        logger.info(f"Fragment deleted [owner_id={owner_id}] [fragment_id={fragment_id}]")

    def _save(self, fragment: Fragment, data: bytes) -> None:
        fragment.touch()
        logger.debug(f"Saving fragment metadata [fragment_id={fragment.id}]")
        self._call_store("save fragment metadata", self.store.put_metadata,
                         fragment.owner_id, fragment.id, fragment.to_record())

        logger.debug(f"Saving fragment data [fragment_id={fragment.id}]")
        self._call_store("save fragment data", self.store.put_payload, fragment.owner_id, fragment.id, data)
