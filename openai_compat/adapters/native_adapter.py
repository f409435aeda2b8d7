"""Native format adapter - converts native responses to OpenAI envelopes."""

import logging
from typing import Optional

from ..config import settings
from ..models.common import TokenUsage
from ..models.native import (
    NativeChatResponse,
    NativeGenerateResponse,
    NativeListResponse,
    NativeResult,
    NativeShowResponse,
)
from ..models.openai import (
    ChatCompletionResponse,
    Choice,
    CompletionChoice,
    CompletionResponse,
    ModelInfo,
    ModelListResponse,
    ResponseMessage,
    Usage,
    new_completion_id,
    now_epoch,
)
from . import model_identity

logger = logging.getLogger(__name__)

DEFAULT_FINISH_REASON = "stop"


class NativeAdapter:
    """Adapter for converting native responses to OpenAI format."""

    @staticmethod
    def finish_reason(result: NativeResult) -> str:
        """Finish reason of a finished generation.

        ``stop`` and ``length`` map one to one; any other native reason is
        passed through. A finished result without a reason stopped normally.
        """
        return result.done_reason or DEFAULT_FINISH_REASON

    @staticmethod
    def usage(
        result: NativeResult,
        prompt_text: str = "",
        completion_text: Optional[str] = None,
        estimate: Optional[bool] = None,
    ) -> Optional[Usage]:
        """Usage from native counts, or from the estimator when it is enabled."""
        token_usage = TokenUsage.from_native(result)
        if token_usage is None:
            if estimate is None:
                estimate = settings.ESTIMATE_USAGE
            if not estimate:
                return None
            if completion_text is None:
                completion_text = result.text
            token_usage = TokenUsage.estimate(prompt_text, completion_text)
        return Usage(**token_usage.to_openai())

    @classmethod
    def to_chat_completion(
        cls,
        result: NativeChatResponse,
        requested_model: str,
        prompt_text: str = "",
    ) -> ChatCompletionResponse:
        """Build the ``chat.completion`` envelope for a complete native reply."""
        return ChatCompletionResponse(
            id=new_completion_id("chatcmpl"),
            created=now_epoch(),
            model=result.model or requested_model,
            system_fingerprint=settings.SYSTEM_FINGERPRINT,
            choices=[
                Choice(
                    index=0,
                    message=ResponseMessage(role=result.role, content=result.text),
                    finish_reason=cls.finish_reason(result),
                )
            ],
            usage=cls.usage(result, prompt_text),
        )

    @classmethod
    def to_completion(
        cls,
        result: NativeGenerateResponse,
        requested_model: str,
        prompt_text: str = "",
    ) -> CompletionResponse:
        """Build the ``text_completion`` envelope for a complete native reply."""
        return CompletionResponse(
            id=new_completion_id("cmpl"),
            created=now_epoch(),
            model=result.model or requested_model,
            system_fingerprint=settings.SYSTEM_FINGERPRINT,
            choices=[
                CompletionChoice(
                    index=0,
                    text=result.text,
                    finish_reason=cls.finish_reason(result),
                )
            ],
            usage=cls.usage(result, prompt_text),
        )

    @staticmethod
    def to_model_list(result: NativeListResponse) -> ModelListResponse:
        """Wrap every native model; no models is an empty list, not an error."""
        models = result.models or []
        logger.debug(f"Listing {len(models)} native models")
        return ModelListResponse(
            data=[model_identity.from_native_model(m) for m in models]
        )

    @staticmethod
    def to_model(requested: str, result: NativeShowResponse) -> ModelInfo:
        """Entry for a single model, keyed by the requested name."""
        if result.model and result.model != requested:
            logger.debug(f"Native service reports {result.model!r} for {requested!r}")
        return model_identity.from_show_response(requested, result)
