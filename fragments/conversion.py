"""
Conversion engine for fragment data.

A retrieval request may name an output type through an extension. The
engine first checks the type registry (is this a legal conversion for the
native type at all?) and then dispatches on the (native, target) pair.
Pairs the registry allows but no transform handles end in
ConversionNotImplementedError, which is distinct from the client-side
ConversionNotSupportedError.
"""

import codecs
import csv
import io
import json
from dataclasses import dataclass
from typing import Optional

import markdown
import yaml
from PIL import Image

from common.logging_config import get_logger
from fragments import media_types
from fragments.exceptions import ConversionNotImplementedError, ConversionNotSupportedError

logger = get_logger(__name__)

# Pillow format names for the supported image types.
PILLOW_FORMATS = {
    media_types.IMAGE_PNG: "PNG",
    media_types.IMAGE_JPEG: "JPEG",
    media_types.IMAGE_WEBP: "WEBP",
    media_types.IMAGE_GIF: "GIF",
    media_types.IMAGE_AVIF: "AVIF",
}

MARKDOWN_EXTENSIONS = ["fenced_code", "tables"]


@dataclass(frozen=True)
class ConversionResult:
    """
    Output of a fragment retrieval.

    Attributes:
        data: Bytes to return to the caller
        content_type: Content-Type header value describing data
        converted: False when the stored bytes are returned unchanged
    """
    data: bytes
    content_type: str
    converted: bool = False


def convert_fragment_data(
    data: bytes,
    fragment_type: str,
    extension: Optional[str] = None
) -> ConversionResult:
    """
    Produce the representation of a fragment requested by an extension.

    Args:
        data: Stored fragment bytes
        fragment_type: Stored fragment Content-Type (may carry parameters)
        extension: Optional retrieval extension (e.g., ".html"); unknown
            extensions are treated as no conversion request

    Returns:
        ConversionResult with the output bytes and Content-Type

    Raises:
        ConversionNotSupportedError: If the target is not convertible from the native type
        ConversionNotImplementedError: If the pair is allowed but has no transform
    """
    native, parameters = media_types.parse_content_type(fragment_type)
    charset = parameters.get("charset")
    target = media_types.type_for_extension(extension)

    if target is None or target == native:
        return ConversionResult(data=data, content_type=fragment_type)

    formats = media_types.formats_for(native)
    if target not in formats:
        logger.warning(f"Rejected conversion {native} -> {target}")
        raise ConversionNotSupportedError(native, formats)

    logger.debug(f"Converting fragment data {native} -> {target} [size={len(data)}]")
    converted = convert(data, native, target, charset)

    # text/plain output is the stored bytes, so it keeps the stored charset
    output_charset = charset if target == media_types.TEXT_PLAIN else None

    return ConversionResult(
        data=converted,
        content_type=media_types.content_type_header(target, output_charset),
        converted=True,
    )


def convert(data: bytes, native: str, target: str, charset: Optional[str] = None) -> bytes:
    """
    Transform bytes of one base type into another.

    Callers are expected to have checked the pair against the registry.
    Text sources are decoded with charset (utf-8 when absent); text
    output is always utf-8.

    Raises:
        ConversionNotImplementedError: If no transform exists for the pair
    """
    match (native, target):
        case (media_types.TEXT_MARKDOWN, media_types.TEXT_HTML):
            return markdown_to_html(data, charset)
        case (media_types.TEXT_MARKDOWN | media_types.TEXT_HTML | media_types.TEXT_CSV, media_types.TEXT_PLAIN):
            return data
        case (media_types.APPLICATION_JSON | media_types.APPLICATION_YAML, media_types.TEXT_PLAIN):
            return data
        case (media_types.TEXT_CSV, media_types.APPLICATION_JSON):
            return csv_to_json(data, charset)
        case (media_types.APPLICATION_JSON, media_types.APPLICATION_YAML):
            return json_to_yaml(data)
        case (source, destination) if source in PILLOW_FORMATS and destination in PILLOW_FORMATS:
            return convert_image(data, destination)
        case _:
            raise ConversionNotImplementedError(
                f"Type conversion from {native} to {target} is currently not supported by the API"
            )


def _decode_text(data: bytes, charset: Optional[str] = None) -> str:
    encoding = "utf-8"
    if charset:
        try:
            encoding = codecs.lookup(charset).name
        except LookupError:
            logger.warning(f"Unknown charset {charset!r}, decoding as utf-8")
    if encoding == "utf-8":
        encoding = "utf-8-sig"
    return data.decode(encoding, errors="replace")


def markdown_to_html(data: bytes, charset: Optional[str] = None) -> bytes:
    """Render Markdown source to HTML."""
    return markdown.markdown(_decode_text(data, charset), extensions=MARKDOWN_EXTENSIONS).encode("utf-8")


def csv_to_json(data: bytes, charset: Optional[str] = None) -> bytes:
    """
    Convert CSV rows into a JSON array of objects keyed by the header row.
    """
    reader = csv.DictReader(io.StringIO(_decode_text(data, charset)))
    rows = [dict(row) for row in reader]
    return json.dumps(rows, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def json_to_yaml(data: bytes) -> bytes:
    """Re-serialize a JSON document as YAML, preserving key order."""
    document = json.loads(data)
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True).encode("utf-8")


def convert_image(data: bytes, target: str) -> bytes:
    """
    Decode an image and re-encode it in the target format.

    Raises:
        ConversionNotImplementedError: If the installed Pillow has no encoder for the target
    """
    pillow_format = PILLOW_FORMATS[target]
    Image.init()
    if pillow_format not in Image.SAVE:
        raise ConversionNotImplementedError(f"No {pillow_format} encoder is available for {target}")

    with Image.open(io.BytesIO(data)) as image:
        image.load()
        prepared = _prepare_image(image, pillow_format)
        output = io.BytesIO()
        prepared.save(output, format=pillow_format)

    return output.getvalue()


def _prepare_image(image: Image.Image, pillow_format: str) -> Image.Image:
    has_alpha = "A" in image.getbands() or "transparency" in image.info

    if pillow_format == "JPEG":
        if image.mode in ("RGB", "L", "CMYK"):
            return image
        return image.convert("RGB")

    if pillow_format == "GIF":
        if image.mode in ("P", "L", "RGB", "RGBA"):
            return image
        return image.convert("RGBA" if has_alpha else "RGB")

    if image.mode in ("RGB", "RGBA"):
        return image
    if pillow_format == "PNG" and image.mode in ("L", "LA", "P", "1"):
        return image
    return image.convert("RGBA" if has_alpha else "RGB")
