"""Repository layer for fragment storage backends."""

from common.logging_config import get_logger
from fragments.exceptions import ConfigurationError
from fragments.repositories.base import FragmentStore
from fragments.repositories.memory_repository import MemoryFragmentStore
from fragments.repositories.sqlite_repository import SqliteFragmentStore

logger = get_logger(__name__)

STORAGE_BACKENDS = {
    "memory": MemoryFragmentStore,
    "sqlite": SqliteFragmentStore,
}


def create_fragment_store(backend: str) -> FragmentStore:
    """
    Instantiate the storage backend named in configuration.

    Args:
        backend: Backend name ("memory" or "sqlite")

    Raises:
        ConfigurationError: If the backend name is unknown
    """
    store_class = STORAGE_BACKENDS.get(backend)
    if store_class is None:
        raise ConfigurationError(
            f"Unknown storage backend '{backend}', expected one of: {', '.join(STORAGE_BACKENDS)}"
        )

    if backend == "sqlite":
        from fragments.database import init_database
        init_database()

    logger.info(f"Using {backend} fragment store")
    return store_class()


__all__ = [
    "FragmentStore",
    "MemoryFragmentStore",
    "SqliteFragmentStore",
    "create_fragment_store",
]
