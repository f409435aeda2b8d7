"""Utility modules."""

from .debug_logger import (
    log_incoming_request,
    log_native_request,
    log_native_response,
    log_outgoing_response,
    log_stream_chunk,
)

__all__ = [
    "log_incoming_request",
    "log_outgoing_response",
    "log_stream_chunk",
    "log_native_request",
    "log_native_response",
]
