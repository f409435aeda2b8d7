"""Adapters for format conversion."""

from .base import decode_image_url, parse_data_url
from .native_adapter import NativeAdapter
from .openai_adapter import OpenAIAdapter

__all__ = [
    "NativeAdapter",
    "OpenAIAdapter",
    "decode_image_url",
    "parse_data_url",
]
