"""Text completion routes."""

import logging
import uuid

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ..adapters.native_adapter import NativeAdapter
from ..adapters.openai_adapter import OpenAIAdapter
from ..models.native import NativeGenerateResponse
from ..models.openai import CompletionRequest, CompletionResponse
from ..services.native import NativeEndpoint, NativeHandler, get_native_handler
from ..services.streaming import SSE_HEADERS, CompletionStreamReassembler, stream_events
from ..utils.debug_logger import log_incoming_request, log_outgoing_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Completions"])


@router.post("/completions", response_model=CompletionResponse)
async def completions(
    request: CompletionRequest,
    req: Request,
    native: NativeHandler = Depends(get_native_handler),
):
    """OpenAI-compatible text completions endpoint, backed by ``/api/generate``."""
    request_id = uuid.uuid4().hex[:12]
    log_incoming_request(
        request_id,
        req.method,
        req.url.path,
        headers=dict(req.headers),
        body=request.model_dump(exclude_none=True),
    )

    native_request = OpenAIAdapter.to_native_generate(request)

    result = await native.handle(NativeEndpoint.GENERATE, native_request)
    if not result.ok:
        logger.info(f"Request {request_id}: forwarding native status {result.status_code}")
        log_outgoing_response(request_id, result.status_code, result.body)
        return result.passthrough()

    if request.stream:
        reassembler = CompletionStreamReassembler(request.model, request.prompt)
        log_outgoing_response(request_id, result.status_code, is_stream=True)
        return StreamingResponse(
            stream_events(reassembler, result.iter_events(), request_id),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    response = NativeAdapter.to_completion(
        NativeGenerateResponse.model_validate(result.json()),
        request.model,
        request.prompt,
    )
    log_outgoing_response(request_id, result.status_code, response.model_dump())
    return response
