"""Configuration settings for the Fragments service."""

import os


FRAGMENTS_HOST = os.environ.get("FRAGMENTS_HOST", "0.0.0.0")

FRAGMENTS_PORT = int(os.environ.get("FRAGMENTS_PORT", "8080"))

STORAGE_BACKEND = os.environ.get("FRAGMENTS_STORAGE_BACKEND", "memory").lower()

DATABASE_PATH = os.environ.get("FRAGMENTS_DATABASE_PATH", "/app/data/fragments.db")

HTPASSWD_FILE = os.environ.get("FRAGMENTS_HTPASSWD_FILE")

API_URL = os.environ.get("FRAGMENTS_API_URL")
