"""Streaming reassembly of native events into OpenAI stream chunks.

A reassembler lives for exactly one request and moves through
``IDLE -> STREAMING -> TERMINATED``. The first native event fixes the
chunk id, creation time and model for the whole exchange; each later event
produces at most one chunk carrying only the new content; the native
``done`` event produces the single terminal chunk with a finish reason.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, AsyncGenerator, AsyncIterator, Callable, Dict, List, Optional, Type, Union

import httpx
from pydantic import BaseModel, ValidationError

from ..adapters.native_adapter import NativeAdapter
from ..config import settings
from ..errors import NativeStreamError, StreamStateError, openai_error_body
from ..models.native import NativeChatResponse, NativeGenerateResponse, NativeResult
from ..models.openai import (
    ChatCompletionStreamResponse,
    CompletionChoice,
    CompletionResponse,
    StreamChoice,
    Usage,
    new_completion_id,
    now_epoch,
)
from ..utils.debug_logger import log_stream_chunk

logger = logging.getLogger(__name__)

DONE_FRAME = "data: [DONE]\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class StreamState(Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    TERMINATED = "terminated"


def sse_frame(payload: Union[BaseModel, Dict[str, Any]]) -> str:
    """Frame one JSON object as a server-sent event."""
    if isinstance(payload, BaseModel):
        data = payload.model_dump_json()
    else:
        data = json.dumps(payload)
    return f"data: {data}\n\n"


class StreamReassembler(ABC):
    """Base state machine; subclasses decide the chunk shape."""

    native_model: Type[NativeResult]
    id_prefix: str

    def __init__(
        self,
        requested_model: str,
        prompt_text: str = "",
        id_factory: Optional[Callable[[str], str]] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.requested_model = requested_model
        self.prompt_text = prompt_text
        self._id_factory = id_factory or new_completion_id
        self._clock = clock or now_epoch

        self.state = StreamState.IDLE
        self.id: Optional[str] = None
        self.created: Optional[int] = None
        self.model: Optional[str] = None
        self._completion: List[str] = []

    @property
    def terminated(self) -> bool:
        return self.state is StreamState.TERMINATED

    def feed(self, event: Union[Dict[str, Any], NativeResult]) -> List[BaseModel]:
        """
        Consume one native event and return the chunks it produces, in order.

        Raises:
            StreamStateError: the stream has already terminated
            NativeStreamError: the event reports or is itself a failure
        """
        if self.terminated:
            raise StreamStateError("stream already terminated, cannot accept more events")

        result = self._parse(event)
        if result.error:
            raise NativeStreamError(result.error)

        text = result.text
        chunks: List[BaseModel] = []

        if self.state is StreamState.IDLE:
            self._start(result)
            first = self._first_chunk(result)
            if first is not None:
                chunks.append(first)
        elif text:
            chunks.append(self._delta_chunk(text))

        if text:
            self._completion.append(text)

        if result.done:
            chunks.append(
                self._terminal_chunk(NativeAdapter.finish_reason(result), self._usage(result))
            )
            self._release()

        return chunks

    def cancel(self) -> None:
        """Caller went away: stop without a terminal chunk."""
        if not self.terminated:
            logger.info(f"Stream {self.id or '<not started>'} cancelled")
        self._release()

    def fail(self) -> None:
        """Native side failed mid-stream: stop without a terminal chunk."""
        self._release()

    def _parse(self, event: Union[Dict[str, Any], NativeResult]) -> NativeResult:
        if isinstance(event, NativeResult):
            return event
        try:
            return self.native_model.model_validate(event)
        except ValidationError as e:
            raise NativeStreamError(f"malformed native stream event: {e}") from e

    def _start(self, result: NativeResult) -> None:
        self.state = StreamState.STREAMING
        self.id = self._id_factory(self.id_prefix)
        self.created = self._clock()
        self.model = result.model or self.requested_model
        logger.debug(f"Stream {self.id} started for model {self.model}")

    def _usage(self, result: NativeResult) -> Optional[Usage]:
        return NativeAdapter.usage(
            result,
            prompt_text=self.prompt_text,
            completion_text="".join(self._completion),
        )

    def _release(self) -> None:
        self.state = StreamState.TERMINATED
        self._completion = []

    @abstractmethod
    def _first_chunk(self, result: NativeResult) -> Optional[BaseModel]:
        """Chunk for the first event, or None to emit nothing."""

    @abstractmethod
    def _delta_chunk(self, text: str) -> BaseModel:
        """Chunk carrying one non-empty piece of content."""

    @abstractmethod
    def _terminal_chunk(self, finish_reason: str, usage: Optional[Usage]) -> BaseModel:
        """Last chunk of the stream, carrying the finish reason."""


class ChatStreamReassembler(StreamReassembler):
    """Reassembles ``/api/chat`` events into ``chat.completion.chunk`` objects."""

    native_model = NativeChatResponse
    id_prefix = "chatcmpl"

    def _chunk(
        self,
        delta: Dict[str, Any],
        finish_reason: Optional[str] = None,
        usage: Optional[Usage] = None,
    ) -> ChatCompletionStreamResponse:
        return ChatCompletionStreamResponse(
            id=self.id,
            created=self.created,
            model=self.model,
            system_fingerprint=settings.SYSTEM_FINGERPRINT,
            choices=[StreamChoice(index=0, delta=delta, finish_reason=finish_reason)],
            usage=usage,
        )

    def _first_chunk(self, result: NativeChatResponse) -> ChatCompletionStreamResponse:
        # The role announcement is sent even when it carries no content
        return self._chunk({"role": result.role, "content": result.text})

    def _delta_chunk(self, text: str) -> ChatCompletionStreamResponse:
        return self._chunk({"content": text})

    def _terminal_chunk(
        self, finish_reason: str, usage: Optional[Usage]
    ) -> ChatCompletionStreamResponse:
        return self._chunk({}, finish_reason, usage)


class CompletionStreamReassembler(StreamReassembler):
    """Reassembles ``/api/generate`` events into ``text_completion`` chunks."""

    native_model = NativeGenerateResponse
    id_prefix = "cmpl"

    def _chunk(
        self,
        text: str,
        finish_reason: Optional[str] = None,
        usage: Optional[Usage] = None,
    ) -> CompletionResponse:
        return CompletionResponse(
            id=self.id,
            created=self.created,
            model=self.model,
            system_fingerprint=settings.SYSTEM_FINGERPRINT,
            choices=[CompletionChoice(index=0, text=text, finish_reason=finish_reason)],
            usage=usage,
        )

    def _first_chunk(self, result: NativeGenerateResponse) -> Optional[CompletionResponse]:
        if not result.text:
            return None
        return self._chunk(result.text)

    def _delta_chunk(self, text: str) -> CompletionResponse:
        return self._chunk(text)

    def _terminal_chunk(self, finish_reason: str, usage: Optional[Usage]) -> CompletionResponse:
        return self._chunk("", finish_reason, usage)


async def stream_events(
    reassembler: StreamReassembler,
    events: AsyncIterator[Dict[str, Any]],
    request_id: str = "",
) -> AsyncGenerator[str, None]:
    """
    Drive native events through a reassembler and yield SSE frames.

    Ends with ``data: [DONE]`` after the terminal chunk. A native failure
    after streaming began yields one error event and no sentinel. If the
    consumer stops (client disconnect), the native event iterator is closed
    so the native service stops generating.
    """
    chunk_index = 0
    try:
        async for event in events:
            for chunk in reassembler.feed(event):
                log_stream_chunk(request_id, chunk_index, chunk.object, chunk.model_dump())
                chunk_index += 1
                yield sse_frame(chunk)
            if reassembler.terminated:
                yield DONE_FRAME
                return
        raise NativeStreamError("native stream ended before generation completed")
    except (NativeStreamError, httpx.HTTPError) as e:
        logger.error(f"Stream {reassembler.id or request_id} failed after {chunk_index} chunks: {e}")
        reassembler.fail()
        yield sse_frame(openai_error_body(str(e) or type(e).__name__, "api_error"))
    except (asyncio.CancelledError, GeneratorExit):
        reassembler.cancel()
        raise
    finally:
        aclose = getattr(events, "aclose", None)
        if aclose is not None:
            # Must complete even when the request task is being cancelled
            await asyncio.shield(aclose())
