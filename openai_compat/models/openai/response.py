"""OpenAI chat/text completion and model response models."""

import time
import uuid
from typing import Any, ClassVar, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, model_serializer


def new_completion_id(prefix: str) -> str:
    """Generate a response id, e.g. ``chatcmpl-<24 hex chars>``."""
    return f"{prefix}-{uuid.uuid4().hex[:24]}"


def now_epoch() -> int:
    return int(time.time())


class OmitNoneModel(BaseModel):
    """Leaves the fields named in ``omit_if_none`` out of the payload when unset.

    Everything else, including ``finish_reason: null``, is always serialized.
    """

    omit_if_none: ClassVar[Tuple[str, ...]] = ()

    @model_serializer(mode="wrap")
    def _drop_unset_optionals(self, handler):
        data = handler(self)
        for key in self.omit_if_none:
            if data.get(key) is None:
                data.pop(key, None)
        return data


class Usage(OmitNoneModel):
    """Token usage statistics."""

    omit_if_none: ClassVar[Tuple[str, ...]] = ("estimated",)

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    # True when the counts come from the whitespace estimator
    estimated: Optional[bool] = None


class ResponseMessage(BaseModel):
    """Response message in choice."""

    role: str = "assistant"
    content: str


class Choice(BaseModel):
    """Non-streaming chat completion choice."""

    index: int = 0
    message: ResponseMessage
    finish_reason: Optional[str] = None
    logprobs: Optional[Any] = None


class ChatCompletionResponse(OmitNoneModel):
    """OpenAI-compatible chat completion response."""

    omit_if_none: ClassVar[Tuple[str, ...]] = ("usage",)

    id: str = Field(default_factory=lambda: new_completion_id("chatcmpl"))
    object: Literal["chat.completion"] = "chat.completion"
    created: int = Field(default_factory=now_epoch)
    model: str
    system_fingerprint: Optional[str] = None
    choices: List[Choice]
    usage: Optional[Usage] = None


class StreamChoice(BaseModel):
    """Streaming chat completion choice; ``delta`` holds only the new content."""

    index: int = 0
    delta: Dict[str, Any]
    finish_reason: Optional[str] = None
    logprobs: Optional[Any] = None


class ChatCompletionStreamResponse(OmitNoneModel):
    """OpenAI-compatible streaming chat completion chunk."""

    omit_if_none: ClassVar[Tuple[str, ...]] = ("usage",)

    id: str
    object: Literal["chat.completion.chunk"] = "chat.completion.chunk"
    created: int
    model: str
    system_fingerprint: Optional[str] = None
    choices: List[StreamChoice]
    usage: Optional[Usage] = None


class CompletionChoice(BaseModel):
    """Text completion choice, used both whole and as a streamed delta."""

    index: int = 0
    text: str = ""
    finish_reason: Optional[str] = None
    logprobs: Optional[Any] = None


class CompletionResponse(OmitNoneModel):
    """OpenAI-compatible text completion response or stream chunk."""

    omit_if_none: ClassVar[Tuple[str, ...]] = ("usage",)

    id: str = Field(default_factory=lambda: new_completion_id("cmpl"))
    object: Literal["text_completion"] = "text_completion"
    created: int = Field(default_factory=now_epoch)
    model: str
    system_fingerprint: Optional[str] = None
    choices: List[CompletionChoice]
    usage: Optional[Usage] = None


class ModelInfo(BaseModel):
    """Model information."""

    id: str
    object: Literal["model"] = "model"
    created: int
    owned_by: str


class ModelListResponse(BaseModel):
    """Model list response."""

    object: Literal["list"] = "list"
    data: List[ModelInfo]
