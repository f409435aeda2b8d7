"""Model listing and retrieval routes."""

import logging

from fastapi import APIRouter, Depends

from ..adapters.native_adapter import NativeAdapter
from ..adapters.openai_adapter import OpenAIAdapter
from ..models.native import NativeListResponse, NativeShowResponse
from ..models.openai import ModelInfo, ModelListResponse
from ..services.native import NativeEndpoint, NativeHandler, get_native_handler

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Models"])


@router.get("/models", response_model=ModelListResponse)
async def list_models(native: NativeHandler = Depends(get_native_handler)):
    """
    List the models available on the native service.

    Returns models in OpenAI-compatible format.
    """
    result = await native.handle(NativeEndpoint.LIST, OpenAIAdapter.to_native_list())
    if not result.ok:
        return result.passthrough()

    return NativeAdapter.to_model_list(NativeListResponse.model_validate(result.json()))


@router.get("/models/{model_id:path}", response_model=ModelInfo)
async def get_model(model_id: str, native: NativeHandler = Depends(get_native_handler)):
    """
    Get information about a specific model.

    Args:
        model_id: The model identifier, e.g. ``llama3:8b`` or ``user/model``
    """
    result = await native.handle(NativeEndpoint.SHOW, OpenAIAdapter.to_native_show(model_id))
    if not result.ok:
        logger.warning(f"Model lookup for {model_id!r} failed with {result.status_code}")
        return result.passthrough()

    return NativeAdapter.to_model(model_id, NativeShowResponse.model_validate(result.json()))
