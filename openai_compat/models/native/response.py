"""Native service response models.

The same models describe a complete response and a single streamed event;
a stream ends with the event whose ``done`` is true.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from .request import NativeMessage


class NativeResult(BaseModel, ABC):
    """Fields shared by native chat and generate responses."""

    model_config = ConfigDict(extra="ignore")

    model: str = ""
    created_at: Optional[str] = None
    done: bool = False
    done_reason: Optional[str] = None
    prompt_eval_count: Optional[int] = None
    eval_count: Optional[int] = None
    error: Optional[str] = None

    @property
    @abstractmethod
    def text(self) -> str:
        """Generated text carried by this response or event."""

    def has_counts(self) -> bool:
        return self.prompt_eval_count is not None or self.eval_count is not None


class NativeChatResponse(NativeResult):
    """Response (or stream event) of ``/api/chat``."""

    message: Optional[NativeMessage] = None

    @property
    def text(self) -> str:
        return self.message.content if self.message else ""

    @property
    def role(self) -> str:
        return self.message.role if self.message else "assistant"


class NativeGenerateResponse(NativeResult):
    """Response (or stream event) of ``/api/generate``."""

    response: str = ""

    @property
    def text(self) -> str:
        return self.response


class NativeModel(BaseModel):
    """Entry of ``/api/tags``."""

    model_config = ConfigDict(extra="ignore")

    name: str
    model: Optional[str] = None
    modified_at: Optional[str] = None
    size: Optional[int] = None
    digest: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class NativeListResponse(BaseModel):
    """Response of ``/api/tags``."""

    models: Optional[List[NativeModel]] = None


class NativeShowResponse(BaseModel):
    """Response of ``/api/show``."""

    model_config = ConfigDict(extra="ignore")

    model: Optional[str] = None
    modified_at: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
