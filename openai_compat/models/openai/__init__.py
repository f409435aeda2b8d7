"""OpenAI-compatible data models."""

from .content import (
    ContentPart,
    ImageUrl,
    ImageUrlContent,
    TextContent,
)
from .request import (
    ChatCompletionRequest,
    CompletionRequest,
    Message,
    ResponseFormat,
    SamplingOptions,
)
from .response import (
    ChatCompletionResponse,
    ChatCompletionStreamResponse,
    Choice,
    CompletionChoice,
    CompletionResponse,
    ModelInfo,
    ModelListResponse,
    ResponseMessage,
    StreamChoice,
    Usage,
    new_completion_id,
    now_epoch,
)

__all__ = [
    # Content
    "ContentPart",
    "ImageUrl",
    "ImageUrlContent",
    "TextContent",
    # Request
    "ChatCompletionRequest",
    "CompletionRequest",
    "Message",
    "ResponseFormat",
    "SamplingOptions",
    # Response
    "ChatCompletionResponse",
    "ChatCompletionStreamResponse",
    "Choice",
    "CompletionChoice",
    "CompletionResponse",
    "ModelInfo",
    "ModelListResponse",
    "ResponseMessage",
    "StreamChoice",
    "Usage",
    "new_completion_id",
    "now_epoch",
]
