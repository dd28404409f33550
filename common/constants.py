"""Project-wide constants (service identity, API prefix, owner hashing)."""

SERVICE_NAME: str = "fragments"
SERVICE_VERSION: str = "0.1.0"

API_PREFIX: str = "/v1"

OWNER_ID_HASH_ALGORITHM: str = "sha256"
