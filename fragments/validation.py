"""Structural validation of fragment payloads against their declared type."""

import io
import json

import yaml
from PIL import Image, UnidentifiedImageError

from common.logging_config import get_logger
from fragments.exceptions import UnsupportedMediaTypeError
from fragments.media_types import (
    APPLICATION_JSON,
    APPLICATION_YAML,
    IMAGE_TYPES,
    base_type,
)

logger = get_logger(__name__)


def validate_fragment_data(data: bytes, fragment_type: str) -> None:
    """
    Check that a payload is structurally consistent with its declared type.

    Text types (plain, markdown, html, csv) accept any byte sequence.

    Args:
        data: Raw payload bytes
        fragment_type: Declared Content-Type (parameters are ignored)

    Raises:
        UnsupportedMediaTypeError: If the payload does not parse or decode as the declared type
    """
    mime_type = base_type(fragment_type)

    if mime_type == APPLICATION_JSON:
        _validate_json(data)
    elif mime_type == APPLICATION_YAML:
        _validate_yaml(data)
    elif mime_type in IMAGE_TYPES:
        _validate_image(data)


def _validate_json(data: bytes) -> None:
    try:
        json.loads(data)
    except (ValueError, TypeError) as e:
        logger.warning(f"Invalid JSON data: {e}")
        raise UnsupportedMediaTypeError(f"Invalid JSON data, {e}") from e


def _validate_yaml(data: bytes) -> None:
    try:
        yaml.safe_load(data)
    except yaml.YAMLError as e:
        logger.warning(f"Invalid YAML data: {e}")
        raise UnsupportedMediaTypeError(f"Invalid YAML data, {e}") from e


def _validate_image(data: bytes) -> None:
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        logger.warning(f"Invalid image data: {e}")
        raise UnsupportedMediaTypeError(f"Invalid image data, {e}") from e
