"""OpenAI chat and text completion request models.

Sampling values are range-checked here, so an out-of-range value is rejected
as a malformed request before anything reaches the native service.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


class Message(BaseModel):
    """Chat message model.

    ``content`` is kept as raw parts; the content normalizer validates each
    part's tag and payload.
    """

    role: Literal["system", "user", "assistant"]
    content: Union[str, List[Dict[str, Any]]]
    name: Optional[str] = None

    @field_validator("content", mode="before")
    @classmethod
    def null_content_is_empty(cls, v: Any) -> Any:
        """Assistant turns echoed back by clients may carry ``content: null``."""
        if v is None:
            return ""
        return v


class ResponseFormat(BaseModel):
    """Requested output format."""

    type: Literal["text", "json_object"] = "text"


class SamplingOptions(BaseModel):
    """Sampling fields shared by chat and text completion requests."""

    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    top_p: Optional[float] = Field(default=None, ge=0, le=1)
    max_tokens: Optional[int] = Field(default=None, ge=1)
    stop: Optional[Union[str, List[str]]] = None
    seed: Optional[int] = None
    presence_penalty: Optional[float] = Field(default=None, ge=-2, le=2)
    frequency_penalty: Optional[float] = Field(default=None, ge=-2, le=2)

    def stop_sequences(self) -> Optional[List[str]]:
        """Stop sequences as a list, whichever form the client used."""
        if self.stop is None:
            return None
        if isinstance(self.stop, str):
            return [self.stop]
        return list(self.stop)


class ChatCompletionRequest(SamplingOptions):
    """OpenAI-compatible chat completion request.

    Fields outside the schema (``n``, ``logit_bias``, ``tools``...) are
    accepted and ignored.
    """

    model: str
    messages: List[Message] = Field(min_length=1)
    stream: bool = False
    max_completion_tokens: Optional[int] = Field(default=None, ge=1)
    response_format: Optional[ResponseFormat] = None
    user: Optional[str] = None

    def get_effective_max_tokens(self) -> Optional[int]:
        """Get effective max tokens from either field."""
        return self.max_completion_tokens or self.max_tokens


class CompletionRequest(SamplingOptions):
    """OpenAI-compatible (legacy) text completion request."""

    model: str
    prompt: str
    suffix: Optional[str] = None
    stream: bool = False
    user: Optional[str] = None
