"""Chat completion routes."""

import logging
import uuid

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ..adapters.native_adapter import NativeAdapter
from ..adapters.openai_adapter import OpenAIAdapter
from ..models.native import NativeChatResponse
from ..models.openai import ChatCompletionRequest, ChatCompletionResponse
from ..services.native import NativeEndpoint, NativeHandler, get_native_handler
from ..services.streaming import SSE_HEADERS, ChatStreamReassembler, stream_events
from ..utils.debug_logger import log_incoming_request, log_outgoing_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])


@router.post("/chat/completions", response_model=ChatCompletionResponse)
async def chat_completions(
    request: ChatCompletionRequest,
    req: Request,
    native: NativeHandler = Depends(get_native_handler),
):
    """
    OpenAI-compatible chat completions endpoint.

    Translates the request to ``/api/chat``; native errors are returned
    unchanged, successful replies are wrapped as ``chat.completion`` (or
    streamed as ``chat.completion.chunk`` events).
    """
    request_id = uuid.uuid4().hex[:12]
    log_incoming_request(
        request_id,
        req.method,
        req.url.path,
        headers=dict(req.headers),
        body=request.model_dump(exclude_none=True),
    )

    native_request = OpenAIAdapter.to_native_chat(request)
    prompt_text = OpenAIAdapter.prompt_text(native_request)

    result = await native.handle(NativeEndpoint.CHAT, native_request)
    if not result.ok:
        logger.info(f"Request {request_id}: forwarding native status {result.status_code}")
        log_outgoing_response(request_id, result.status_code, result.body)
        return result.passthrough()

    if request.stream:
        reassembler = ChatStreamReassembler(request.model, prompt_text)
        log_outgoing_response(request_id, result.status_code, is_stream=True)
        return StreamingResponse(
            stream_events(reassembler, result.iter_events(), request_id),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    response = NativeAdapter.to_chat_completion(
        NativeChatResponse.model_validate(result.json()),
        request.model,
        prompt_text,
    )
    log_outgoing_response(request_id, result.status_code, response.model_dump())
    return response
