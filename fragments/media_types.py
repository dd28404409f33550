"""
Type registry for supported fragment media types.

Maps every supported native MIME base type to the ordered list of base
types it can be converted into, and maps retrieval extensions to MIME
types. The tables are read-only at runtime.
"""

import re
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from fragments.exceptions import UnsupportedMediaTypeError

TEXT_PLAIN = "text/plain"
TEXT_MARKDOWN = "text/markdown"
TEXT_HTML = "text/html"
TEXT_CSV = "text/csv"
APPLICATION_JSON = "application/json"
APPLICATION_YAML = "application/yaml"
IMAGE_PNG = "image/png"
IMAGE_JPEG = "image/jpeg"
IMAGE_WEBP = "image/webp"
IMAGE_AVIF = "image/avif"
IMAGE_GIF = "image/gif"

IMAGE_TYPES: Tuple[str, ...] = (IMAGE_PNG, IMAGE_JPEG, IMAGE_WEBP, IMAGE_AVIF, IMAGE_GIF)


def _image_formats(native: str) -> Tuple[str, ...]:
    return (native,) + tuple(t for t in IMAGE_TYPES if t != native)


CONVERSION_FORMATS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    TEXT_PLAIN: (TEXT_PLAIN,),
    TEXT_MARKDOWN: (TEXT_MARKDOWN, TEXT_HTML, TEXT_PLAIN),
    TEXT_HTML: (TEXT_HTML, TEXT_PLAIN),
    TEXT_CSV: (TEXT_CSV, TEXT_PLAIN, APPLICATION_JSON),
    APPLICATION_JSON: (APPLICATION_JSON, APPLICATION_YAML, TEXT_PLAIN),
    APPLICATION_YAML: (APPLICATION_YAML, TEXT_PLAIN),
    **{image: _image_formats(image) for image in IMAGE_TYPES},
})

EXTENSION_TYPES: Mapping[str, str] = MappingProxyType({
    ".txt": TEXT_PLAIN,
    ".md": TEXT_MARKDOWN,
    ".html": TEXT_HTML,
    ".csv": TEXT_CSV,
    ".json": APPLICATION_JSON,
    ".yaml": APPLICATION_YAML,
    ".yml": APPLICATION_YAML,
    ".png": IMAGE_PNG,
    ".jpg": IMAGE_JPEG,
    ".jpeg": IMAGE_JPEG,
    ".webp": IMAGE_WEBP,
    ".gif": IMAGE_GIF,
    ".avif": IMAGE_AVIF,
})

# Output types that get an explicit charset in the Content-Type header.
CHARSET_TYPES: Tuple[str, ...] = (TEXT_PLAIN, TEXT_HTML, "text/css", APPLICATION_JSON)

_TOKEN = r"[!#$%&'*+.^_`|~0-9A-Za-z-]+"
_MEDIA_TYPE_RE = re.compile(rf"^({_TOKEN})/({_TOKEN})$")
_PARAMETER_RE = re.compile(rf'^({_TOKEN})=("(?:[^"\\]|\\.)*"|{_TOKEN})$')


def parse_content_type(value: str) -> Tuple[str, Dict[str, str]]:
    """
    Parse a Content-Type value into its base type and parameters.

    Args:
        value: Content-Type value (e.g., "text/plain; charset=utf-8")

    Returns:
        Tuple of (lowercased base type, parameters dict with lowercased names)

    Raises:
        UnsupportedMediaTypeError: If the value is not a well-formed media type
    """
    if not isinstance(value, str) or not value.strip():
        raise UnsupportedMediaTypeError("Content-Type is required")

    parts = value.split(";")
    base = parts[0].strip().lower()
    if not _MEDIA_TYPE_RE.match(base):
        raise UnsupportedMediaTypeError(f"Invalid Content-Type: {value}")

    parameters: Dict[str, str] = {}
    for part in parts[1:]:
        part = part.strip()
        if not part:
            continue
        match = _PARAMETER_RE.match(part)
        if match is None:
            raise UnsupportedMediaTypeError(f"Invalid Content-Type parameter: {part}")
        name, param_value = match.groups()
        if param_value.startswith('"'):
            param_value = re.sub(r"\\(.)", r"\1", param_value[1:-1])
        parameters[name.lower()] = param_value

    return base, parameters


def base_type(value: str) -> str:
    """Return the MIME base type of a Content-Type value, parameters stripped."""
    return parse_content_type(value)[0]


def is_supported(value: str) -> bool:
    """
    Check whether a Content-Type value names a supported native type.

    Unparseable values are reported as unsupported rather than raising.
    """
    try:
        return base_type(value) in CONVERSION_FORMATS
    except UnsupportedMediaTypeError:
        return False


def formats_for(value: str) -> List[str]:
    """
    Get the ordered list of base types a native type can be converted into.

    Returns an empty list for unsupported or unparseable types.
    """
    try:
        return list(CONVERSION_FORMATS.get(base_type(value), ()))
    except UnsupportedMediaTypeError:
        return []


def type_for_extension(extension: Optional[str]) -> Optional[str]:
    """
    Map a retrieval extension (".html" or "html") to its MIME base type.

    Returns None when no extension is given or the extension is unknown.
    """
    if not extension:
        return None
    extension = extension.lower()
    if not extension.startswith("."):
        extension = f".{extension}"
    return EXTENSION_TYPES.get(extension)


def content_type_header(mime_type: str, charset: Optional[str] = None) -> str:
    """
    Build the Content-Type header value for a converted output type.

    Text-like types are labelled with charset, utf-8 when none is given.
    """
    if mime_type in CHARSET_TYPES:
        return f"{mime_type}; charset={charset or 'utf-8'}"
    return mime_type
