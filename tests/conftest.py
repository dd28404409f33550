"""Shared pytest fixtures for all tests."""

import io
from pathlib import Path
from typing import Generator

import bcrypt
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from fragments.repositories import MemoryFragmentStore, SqliteFragmentStore
from fragments.service_locator import set_fragment_store

USERS = {
    'user1@email.com': 'password1',
    'user2@email.com': 'password2',
}


@pytest.fixture
def htpasswd_file(tmp_path, monkeypatch) -> Path:
    """
    Create a temporary htpasswd file with bcrypt hashes for the test users.

    Args:
        tmp_path: pytest tmp_path fixture
        monkeypatch: pytest monkeypatch fixture

    Returns:
        Path to the htpasswd file
    """
    lines = []
    for username, password in USERS.items():
        password_hash = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=4)).decode('utf-8')
        lines.append(f'{username}:{password_hash}')

    path = tmp_path / '.htpasswd'
    path.write_text('\n'.join(lines) + '\n')
    monkeypatch.setattr('fragments.auth.HTPASSWD_FILE', str(path))
    return path


@pytest.fixture
def memory_store() -> Generator[MemoryFragmentStore, None, None]:
    """
    Install a fresh in-memory store as the process-wide store.
    """
    store = MemoryFragmentStore()
    set_fragment_store(store)
    yield store
    set_fragment_store(None)


@pytest.fixture
def sqlite_store(tmp_path, monkeypatch) -> SqliteFragmentStore:
    """
    Create a sqlite store backed by a temporary database file.
    """
    from fragments.database import init_database

    db_path = tmp_path / 'fragments.db'
    monkeypatch.setattr('fragments.database.DATABASE_PATH', str(db_path))
    init_database()
    return SqliteFragmentStore()


@pytest.fixture
def client(htpasswd_file, memory_store) -> TestClient:
    """Create FastAPI test client with a fresh store and known users."""
    from fragments.main import app
    return TestClient(app)


@pytest.fixture
def user1():
    return ('user1@email.com', USERS['user1@email.com'])


@pytest.fixture
def user2():
    return ('user2@email.com', USERS['user2@email.com'])


def make_image(image_format: str, mode: str = 'RGB', size=(8, 8)) -> bytes:
    """
    Encode a small solid-colour image.

    Args:
        image_format: Pillow format name (e.g., 'PNG')
        mode: Pillow image mode
        size: Image dimensions

    Returns:
        Encoded image bytes
    """
    color = (200, 30, 30, 128) if mode == 'RGBA' else (200, 30, 30)
    image = Image.new(mode, size, color)
    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image('PNG')


@pytest.fixture
def image_factory():
    """Return the make_image helper for tests that need several formats."""
    return make_image
