"""Model identity mapping between native model records and OpenAI model entries.

All functions are deterministic: the same native record always yields the
same entry, so no clock or random source is consulted.
"""

import re
from datetime import datetime
from typing import Optional

from ..models.native import NativeModel, NativeShowResponse
from ..models.openai import ModelInfo

DEFAULT_OWNER = "library"

# RFC 3339 with optional fraction (native timestamps carry nanoseconds)
_TIMESTAMP = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:?\d{2})?$"
)


def to_epoch_seconds(timestamp: Optional[str]) -> int:
    """Convert a native RFC 3339 timestamp to whole epoch seconds.

    Missing or unparseable timestamps map to 0. Naive timestamps are UTC.
    """
    if not timestamp:
        return 0
    match = _TIMESTAMP.match(timestamp.strip())
    if not match:
        return 0

    offset = match.group("offset") or "+00:00"
    if offset in ("Z", "z"):
        offset = "+00:00"
    elif ":" not in offset:
        offset = f"{offset[:3]}:{offset[3:]}"

    try:
        parsed = datetime.fromisoformat(f"{match.group('base').replace(' ', 'T')}{offset}")
    except ValueError:
        return 0
    return int(parsed.timestamp())


def owner_of(name: str) -> str:
    """Namespace of ``[host/][namespace/]model[:tag]``, e.g. ``library``."""
    base = name
    colon = base.rfind(":")
    if colon > base.rfind("/"):
        base = base[:colon]

    parts = [p for p in base.split("/") if p]
    if len(parts) >= 2:
        return parts[-2]
    return DEFAULT_OWNER


def to_model_entry(name: str, modified_at: Optional[str]) -> ModelInfo:
    """Build the OpenAI model entry for a native model name."""
    return ModelInfo(
        id=name,
        created=to_epoch_seconds(modified_at),
        owned_by=owner_of(name),
    )


def from_native_model(model: NativeModel) -> ModelInfo:
    """Entry for one ``/api/tags`` record; the id is the native name verbatim."""
    return to_model_entry(model.name, model.modified_at)


def from_show_response(requested: str, show: NativeShowResponse) -> ModelInfo:
    """Entry for ``/api/show``; the id is always the name from the request path."""
    return to_model_entry(requested, show.modified_at)
