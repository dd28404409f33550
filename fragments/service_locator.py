"""Service locator for the process-wide fragment store."""

from typing import Optional

from fragments.config import STORAGE_BACKEND
from fragments.repositories import FragmentStore, create_fragment_store

_fragment_store: Optional[FragmentStore] = None


def set_fragment_store(store: Optional[FragmentStore]):
    """Set global fragment store instance"""
    global _fragment_store
    _fragment_store = store


def get_fragment_store() -> FragmentStore:
    """Get global fragment store instance, creating the configured backend on first use"""
    global _fragment_store
    if _fragment_store is None:
        _fragment_store = create_fragment_store(STORAGE_BACKEND)
    return _fragment_store
