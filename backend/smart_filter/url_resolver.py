"""
URL Resolver

Image links produced by upstream link generators are often percent-encoded
two or three times. The resolver peels encoding layers until the string
stops changing.
"""

import logging
import re
from typing import Optional
from urllib.parse import unquote

from .errors import URLDecodeError

logger = logging.getLogger(__name__)

# A '%' that does not start a two-digit hex escape
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

DEFAULT_MAX_PASSES = 10


def decode_once(value: str) -> str:
    """
    Apply one strict percent-decoding pass.

    Raises:
        URLDecodeError: on a stray '%' or escapes that are not valid UTF-8.
    """
    if _MALFORMED_ESCAPE.search(value):
        raise URLDecodeError(f"Malformed escape sequence in {value[:60]!r}")
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError as e:
        raise URLDecodeError(str(e)) from e


def resolve_image_url(value: Optional[str], max_passes: int = DEFAULT_MAX_PASSES) -> Optional[str]:
    """
    Percent-decode ``value`` until a fixed point is reached.

    Stops when no '%' remains, when a pass no longer changes the string, or
    after ``max_passes`` passes. A decoding failure is not an error: the last
    successfully decoded value is returned instead.
    """
    if not value:
        return value

    current = value
    for _ in range(max_passes):
        if "%" not in current:
            break
        try:
            decoded = decode_once(current)
        except URLDecodeError as e:
            logger.debug(f"[URLResolver] Decoding stopped, keeping last value: {e}")
            break
        if decoded == current:
            break
        current = decoded
    else:
        if "%" in current:
            logger.debug(f"[URLResolver] Gave up after {max_passes} passes: {current[:80]}...")

    return current
