"""Services for the OpenAI compatibility shim."""

from .native import HttpNativeHandler, NativeEndpoint, NativeHandler, NativeResponse
from .streaming import ChatStreamReassembler, CompletionStreamReassembler, StreamState

__all__ = [
    "ChatStreamReassembler",
    "CompletionStreamReassembler",
    "HttpNativeHandler",
    "NativeEndpoint",
    "NativeHandler",
    "NativeResponse",
    "StreamState",
]
