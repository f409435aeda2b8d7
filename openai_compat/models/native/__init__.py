"""Native service data models."""

from .request import (
    NativeChatRequest,
    NativeGenerateRequest,
    NativeMessage,
    NativeOptions,
    NativeShowRequest,
)
from .response import (
    NativeChatResponse,
    NativeGenerateResponse,
    NativeListResponse,
    NativeModel,
    NativeResult,
    NativeShowResponse,
)

__all__ = [
    # Request
    "NativeChatRequest",
    "NativeGenerateRequest",
    "NativeMessage",
    "NativeOptions",
    "NativeShowRequest",
    # Response
    "NativeChatResponse",
    "NativeGenerateResponse",
    "NativeListResponse",
    "NativeModel",
    "NativeResult",
    "NativeShowResponse",
]
