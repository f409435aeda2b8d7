"""Data models for the OpenAI (public) and native APIs."""

from . import native, openai
from .common import TokenUsage

__all__ = [
    # Submodules
    "native",
    "openai",
    # Common
    "TokenUsage",
]
