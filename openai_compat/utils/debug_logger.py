"""Debug logging utility for request/response payload inspection."""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional, Union

from ..config import settings

logger = logging.getLogger("debug.payloads")


def _truncate(text: str, max_length: int = 0) -> str:
    """Truncate text if max_length is set."""
    if max_length <= 0 or len(text) <= max_length:
        return text
    return text[:max_length] + f"... [truncated, total {len(text)} chars]"


def _safe_json(obj: Any, indent: int = 2) -> str:
    """Safely serialize object to JSON string."""
    try:
        return json.dumps(obj, ensure_ascii=False, indent=indent, default=str)
    except (TypeError, ValueError) as e:
        return f"<serialization error: {e}>"


def _body_text(body: Union[str, bytes, Any]) -> str:
    """Render a raw or structured body for the log."""
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        return body
    return _safe_json(body)


def log_incoming_request(
    request_id: str,
    method: str,
    path: str,
    headers: Optional[Dict[str, str]] = None,
    body: Optional[Any] = None,
) -> None:
    """Log incoming public-schema request."""
    if not settings.DEBUG_LOG_PAYLOADS:
        return

    timestamp = datetime.now().isoformat()
    max_len = settings.DEBUG_LOG_MAX_LENGTH

    log_parts = [
        f"\n{'='*60}",
        f"[{timestamp}] INCOMING REQUEST: {request_id}",
        f"{'='*60}",
        f"Method: {method}",
        f"Path: {path}",
    ]

    if headers:
        # Mask sensitive headers
        safe_headers = {
            k: ("***" if k.lower() in ("authorization", "x-api-key") else v)
            for k, v in headers.items()
        }
        log_parts.append(f"Headers: {_safe_json(safe_headers)}")

    if body is not None:
        log_parts.append(f"Body:\n{_truncate(_body_text(body), max_len)}")

    log_parts.append("=" * 60)
    logger.info("\n".join(log_parts))


def log_outgoing_response(
    request_id: str,
    status_code: int,
    body: Optional[Any] = None,
    is_stream: bool = False,
) -> None:
    """Log outgoing response to the caller."""
    if not settings.DEBUG_LOG_PAYLOADS:
        return

    timestamp = datetime.now().isoformat()
    max_len = settings.DEBUG_LOG_MAX_LENGTH

    log_parts = [
        f"\n{'-'*60}",
        f"[{timestamp}] OUTGOING RESPONSE: {request_id}",
        f"{'-'*60}",
        f"Status: {status_code}",
        f"Stream: {is_stream}",
    ]

    if body is not None and not is_stream:
        log_parts.append(f"Body:\n{_truncate(_body_text(body), max_len)}")
    elif is_stream:
        log_parts.append("Body: <streaming response>")

    log_parts.append("-" * 60)
    logger.info("\n".join(log_parts))


def log_stream_chunk(
    request_id: str,
    chunk_index: int,
    event_type: str,
    data: Optional[Any] = None,
) -> None:
    """Log individual stream chunk."""
    if not settings.DEBUG_LOG_PAYLOADS:
        return

    max_len = settings.DEBUG_LOG_MAX_LENGTH
    data_str = _truncate(_safe_json(data), max_len) if data else ""
    logger.debug(f"[{request_id}] Stream #{chunk_index} ({event_type}): {data_str}")


def log_native_request(path: str, body: Optional[Union[str, bytes]] = None) -> None:
    """Log request sent to the native service."""
    if not settings.DEBUG_LOG_PAYLOADS:
        return

    timestamp = datetime.now().isoformat()
    log_parts = [
        f"\n{'>'*60}",
        f"[{timestamp}] NATIVE REQUEST: {path}",
        f"{'>'*60}",
    ]
    if body is not None:
        log_parts.append(f"Body:\n{_truncate(_body_text(body), settings.DEBUG_LOG_MAX_LENGTH)}")
    log_parts.append(">" * 60)
    logger.info("\n".join(log_parts))


def log_native_response(path: str, status_code: int, body: Optional[bytes] = None) -> None:
    """Log complete (non-streamed) response from the native service."""
    if not settings.DEBUG_LOG_PAYLOADS:
        return

    timestamp = datetime.now().isoformat()
    log_parts = [
        f"\n{'<'*60}",
        f"[{timestamp}] NATIVE RESPONSE: {path}",
        f"{'<'*60}",
        f"Status: {status_code}",
    ]
    if body:
        log_parts.append(f"Body:\n{_truncate(_body_text(body), settings.DEBUG_LOG_MAX_LENGTH)}")
    log_parts.append("<" * 60)
    logger.info("\n".join(log_parts))
