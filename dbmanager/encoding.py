"""Text helpers used when protecting values for inline SQL."""

import codecs
import math
import re
from decimal import Decimal
from typing import Any

# Client encodings with a matching MySQL charset introducer
ENCODING_CHARSETS: dict[str, str] = {
    "cp1252": "latin1",
    "iso-8859-1": "latin1",
    "iso-8859-2": "latin2",
    "iso-8859-5": "latin5",
    "iso-8859-7": "greek",
    "iso-8859-8": "hebrew",
    "iso-8859-13": "latin7",
    "utf-8": "utf8",
    "utf-16": "utf16",
    "utf-32": "utf32",
}

_NUMERIC_PATTERN = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")
_TAG_PATTERN = re.compile(r"<[^>]*>")


def encoding_to_charset(encoding: str | None) -> str | None:
    """Map a textual encoding name onto a charset token.

    Args:
        encoding: Encoding name such as "UTF-8" or "ISO-8859-1"

    Returns:
        Charset token (e.g. "utf8") or None for unrecognized encodings
    """
    if not encoding:
        return None
    return ENCODING_CHARSETS.get(encoding.strip().lower())


def is_numeric(value: Any) -> bool:
    """Check whether a value can be inlined into SQL without quoting.

    Booleans are not numeric. Numeric strings follow the usual decimal
    notation with optional sign, fraction and exponent.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, str):
        return _NUMERIC_PATTERN.match(value) is not None
    return False


def strip_tags(text: str) -> str:
    """Remove markup tags from text."""
    return _TAG_PATTERN.sub("", text)


def decode_text(content: str | bytes) -> str:
    """Decode bytes as UTF-8 when valid, otherwise as 7-bit ASCII."""
    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        return content.decode("ascii", errors="replace")


def convert_character_encoding(content: str | bytes, encoding: str) -> str:
    """Convert content so that it only holds characters of ``encoding``.

    Bytes are decoded first (see ``decode_text``). Characters the target
    encoding cannot represent are replaced.

    Args:
        content: Text or raw bytes
        encoding: Target encoding name

    Returns:
        Converted text
    """
    content = decode_text(content)

    if not content:
        return content

    try:
        codec = codecs.lookup(encoding).name
    except LookupError:
        return content

    content = content.encode(codec, errors="replace").decode(codec)

    if codec == "utf-8":
        # cp1252 euro sign read as latin-1
        content = content.replace("\x80", "€")

    return content
