"""Shared types for the public and native schemas."""

from typing import Optional

from pydantic import BaseModel

from .native import NativeResult


class TokenUsage(BaseModel):
    """Internal token usage representation with conversion methods."""

    input_tokens: int
    output_tokens: int
    estimated: bool = False

    @classmethod
    def from_native(cls, result: NativeResult) -> Optional["TokenUsage"]:
        """Counts reported by the native service, or None when it reports none."""
        if not result.has_counts():
            return None
        return cls(
            input_tokens=result.prompt_eval_count or 0,
            output_tokens=result.eval_count or 0,
        )

    @classmethod
    def estimate(cls, prompt: str, completion: str) -> "TokenUsage":
        """Approximate counts using whitespace-separated words as tokens."""
        return cls(
            input_tokens=len(prompt.split()),
            output_tokens=len(completion.split()),
            estimated=True,
        )

    def to_openai(self) -> dict:
        """Convert to OpenAI usage format."""
        usage = {
            "prompt_tokens": self.input_tokens,
            "completion_tokens": self.output_tokens,
            "total_tokens": self.input_tokens + self.output_tokens,
        }
        if self.estimated:
            usage["estimated"] = True
        return usage
