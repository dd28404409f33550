"""Authentication and security utilities."""

from pathlib import Path
from typing import Dict

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from common.logging_config import get_logger
from fragments.config import HTPASSWD_FILE
from fragments.exceptions import ConfigurationError, InvalidCredentialsError
from fragments.utils import hash_owner_id

logger = get_logger(__name__)

basic_auth = HTTPBasic(realm="fragments")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Args:
        password: Plain text password to verify
        password_hash: Bcrypt hash to verify against ($2a$, $2b$ or $2y$)

    Returns:
        True if password matches hash, False otherwise
    """
    password_bytes = password.encode('utf-8')
    hash_bytes = password_hash.encode('utf-8')
    try:
        return bcrypt.checkpw(password_bytes, hash_bytes)
    except ValueError:
        logger.warning("Unsupported password hash format in htpasswd file")
        return False


def load_htpasswd(path: str) -> Dict[str, str]:
    """
    Read an htpasswd file of "user:bcrypt-hash" lines.

    Blank lines and lines starting with '#' are ignored.

    Raises:
        ConfigurationError: If the file is not configured or cannot be read
    """
    if not path:
        raise ConfigurationError("FRAGMENTS_HTPASSWD_FILE is not configured")

    try:
        content = Path(path).read_text(encoding='utf-8')
    except OSError as e:
        raise ConfigurationError(f"Unable to read htpasswd file {path}: {e}") from e

    users = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith('#') or ':' not in line:
            continue
        username, password_hash = line.split(':', 1)
        users[username] = password_hash
    return users


def authenticate(username: str, password: str) -> str:
    """
    Check Basic credentials against the htpasswd file.

    Returns:
        Owner id derived from the username

    Raises:
        InvalidCredentialsError: If the user is unknown or the password is wrong
    """
    users = load_htpasswd(HTPASSWD_FILE)
    password_hash = users.get(username)

    if password_hash is None or not verify_password(password, password_hash):
        logger.warning("Authentication failed: invalid username or password")
        raise InvalidCredentialsError("Invalid username or password")

    return hash_owner_id(username)


def get_current_owner(credentials: HTTPBasicCredentials = Depends(basic_auth)) -> str:
    """
    FastAPI dependency to validate Basic credentials and derive the owner id.

    Returns:
        Owner id of the authenticated user

    Raises:
        HTTPException: 401 if the Authorization header is missing or malformed
        InvalidCredentialsError: If the credentials do not match
    """
    owner_id = authenticate(credentials.username, credentials.password)
    logger.debug(f"Authenticated request [owner_id={owner_id}]")
    return owner_id
