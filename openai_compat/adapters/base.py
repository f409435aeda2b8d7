"""Base adapter utilities for inline image payloads."""

import base64
import binascii
import logging
import re
from typing import Optional, Tuple

from ..errors import MalformedContentError

logger = logging.getLogger(__name__)

# data:<mediatype>[;<param>...][;base64],<payload>
DATA_URL_PATTERN = re.compile(
    r"^data:(?P<media_type>[^;,]*)(?P<params>(?:;[^;,]*)*),(?P<payload>.*)$",
    re.DOTALL,
)

REMOTE_SCHEMES = ("http://", "https://")

_WHITESPACE = re.compile(r"\s+")


def parse_data_url(url: str) -> Optional[Tuple[str, bool, str]]:
    """Split a data URL into ``(media_type, is_base64, payload)``.

    Returns None if ``url`` is not a data URL.
    """
    match = DATA_URL_PATTERN.match(url)
    if not match:
        return None
    params = [p.strip().lower() for p in match.group("params").split(";") if p.strip()]
    media_type = match.group("media_type").strip().lower() or "text/plain"
    return media_type, "base64" in params, match.group("payload")


def decode_base64(payload: str) -> bytes:
    """Strictly decode standard base64, ignoring embedded whitespace."""
    compact = _WHITESPACE.sub("", payload)
    if not compact:
        raise MalformedContentError("image payload is empty")
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedContentError(f"invalid base64 image payload: {e}") from e


def decode_image_url(url: str) -> bytes:
    """Decode an inline image reference into raw bytes.

    Accepts ``data:image/<type>;base64,<payload>`` and, for older clients, a
    bare base64 payload. Remote URLs cannot be passed to the native service
    and are rejected.
    """
    url = url.strip()
    if url.lower().startswith(REMOTE_SCHEMES):
        raise MalformedContentError(
            "remote image URLs are not supported; send the image inline as a base64 data URL"
        )

    parsed = parse_data_url(url)
    if parsed is None:
        return decode_base64(url)

    media_type, is_base64, payload = parsed
    if not media_type.startswith("image/"):
        raise MalformedContentError(f"unsupported image media type: {media_type}")
    if not is_base64:
        raise MalformedContentError("image data URLs must be base64 encoded")
    logger.debug(f"Decoding inline {media_type} image ({len(payload)} chars)")
    return decode_base64(payload)
