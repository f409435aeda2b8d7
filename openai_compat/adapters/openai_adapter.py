"""OpenAI format adapter - converts public requests to native requests.

Every method here is pure: it builds the native request and leaves calling
the native service to the route.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import TypeAdapter, ValidationError

from ..config import settings
from ..errors import MalformedContentError
from ..models.native import (
    NativeChatRequest,
    NativeGenerateRequest,
    NativeMessage,
    NativeOptions,
    NativeShowRequest,
)
from ..models.openai import (
    ChatCompletionRequest,
    CompletionRequest,
    ContentPart,
    ImageUrlContent,
    Message,
    SamplingOptions,
    TextContent,
)
from .base import decode_image_url

logger = logging.getLogger(__name__)

_content_part = TypeAdapter(ContentPart)


def _scale(value: Optional[float], factor: float) -> Optional[float]:
    if value is None:
        return None
    return value * factor


class OpenAIAdapter:
    """Adapter for converting OpenAI requests to the native format."""

    @classmethod
    def parse_content_part(cls, block: Any) -> Union[TextContent, ImageUrlContent]:
        """Validate one raw content part against the known variants."""
        if not isinstance(block, dict) or "type" not in block:
            raise MalformedContentError("content part must be an object with a 'type' field")
        try:
            return _content_part.validate_python(block)
        except ValidationError as e:
            raise MalformedContentError(
                f"invalid content part of type {block.get('type')!r}: {e.errors()[0]['msg']}"
            ) from e

    @classmethod
    def normalize_content(
        cls, content: Union[str, List[Dict[str, Any]]]
    ) -> Tuple[str, List[bytes]]:
        """
        Canonicalize message content into native text plus image buffers.

        Text parts are joined in order with newlines; image parts are decoded
        in order. A plain string and a single text part normalize identically.
        """
        if isinstance(content, str):
            return content, []

        texts: List[str] = []
        images: List[bytes] = []
        for block in content:
            part = cls.parse_content_part(block)
            if isinstance(part, TextContent):
                texts.append(part.text)
            else:
                images.append(decode_image_url(part.image_url.url))

        return "\n".join(texts), images

    @classmethod
    def to_native_message(cls, message: Message) -> NativeMessage:
        """Convert one chat message."""
        text, images = cls.normalize_content(message.content)
        return NativeMessage(role=message.role, content=text, images=images or None)

    @staticmethod
    def to_native_options(
        request: SamplingOptions,
        max_tokens: Optional[int] = None,
        temperature_scale: Optional[float] = None,
        penalty_scale: Optional[float] = None,
    ) -> Optional[NativeOptions]:
        """Rename public sampling fields to native options.

        Returns None when the request sets none of them.
        """
        if temperature_scale is None:
            temperature_scale = settings.TEMPERATURE_SCALE
        if penalty_scale is None:
            penalty_scale = settings.PENALTY_SCALE

        options = NativeOptions(
            temperature=_scale(request.temperature, temperature_scale),
            top_p=request.top_p,
            stop=request.stop_sequences(),
            num_predict=max_tokens if max_tokens is not None else request.max_tokens,
            seed=request.seed,
            frequency_penalty=_scale(request.frequency_penalty, penalty_scale),
            presence_penalty=_scale(request.presence_penalty, penalty_scale),
        )
        return None if options.is_empty() else options

    @classmethod
    def to_native_chat(
        cls,
        request: ChatCompletionRequest,
        temperature_scale: Optional[float] = None,
        penalty_scale: Optional[float] = None,
    ) -> NativeChatRequest:
        """Translate a chat completion request into ``/api/chat`` form."""
        messages = [cls.to_native_message(msg) for msg in request.messages]

        fmt = None
        if request.response_format and request.response_format.type == "json_object":
            fmt = "json"

        native = NativeChatRequest(
            model=request.model,
            messages=messages,
            stream=request.stream,
            format=fmt,
            options=cls.to_native_options(
                request,
                max_tokens=request.get_effective_max_tokens(),
                temperature_scale=temperature_scale,
                penalty_scale=penalty_scale,
            ),
        )
        logger.debug(
            f"Chat request: model={native.model}, messages={len(messages)}, "
            f"images={sum(len(m.images or []) for m in messages)}, stream={native.stream}"
        )
        return native

    @classmethod
    def to_native_generate(
        cls,
        request: CompletionRequest,
        temperature_scale: Optional[float] = None,
        penalty_scale: Optional[float] = None,
    ) -> NativeGenerateRequest:
        """Translate a text completion request into ``/api/generate`` form."""
        return NativeGenerateRequest(
            model=request.model,
            prompt=request.prompt,
            suffix=request.suffix,
            stream=request.stream,
            options=cls.to_native_options(
                request,
                temperature_scale=temperature_scale,
                penalty_scale=penalty_scale,
            ),
        )

    @staticmethod
    def to_native_list() -> None:
        """Model listing has no request body."""
        return None

    @staticmethod
    def to_native_show(model: str) -> NativeShowRequest:
        """The model name comes from the URL path, never from a body."""
        return NativeShowRequest(model=model)

    @staticmethod
    def prompt_text(native: Union[NativeChatRequest, NativeGenerateRequest]) -> str:
        """Flatten a native request's text, for usage estimation."""
        if isinstance(native, NativeChatRequest):
            return "\n".join(m.content for m in native.messages)
        return native.prompt
