"""Native service request models."""

import base64
from typing import List, Optional

from pydantic import BaseModel, field_serializer


class NativeOptions(BaseModel):
    """Typed native option bag.

    Unset fields are never sent, so the native defaults apply.
    """

    temperature: Optional[float] = None
    top_p: Optional[float] = None
    stop: Optional[List[str]] = None
    num_predict: Optional[int] = None
    seed: Optional[int] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class NativeMessage(BaseModel):
    """Chat message in native form: text plus decoded image buffers."""

    role: str = "assistant"
    content: str = ""
    images: Optional[List[bytes]] = None

    @field_serializer("images", when_used="json-unless-none")
    def _encode_images(self, images: List[bytes]) -> List[str]:
        # The native API carries image bytes as standard base64 strings
        return [base64.b64encode(image).decode("ascii") for image in images]


class NativeChatRequest(BaseModel):
    """Body for ``POST /api/chat``."""

    model: str
    messages: List[NativeMessage]
    stream: bool = False
    format: Optional[str] = None
    options: Optional[NativeOptions] = None


class NativeGenerateRequest(BaseModel):
    """Body for ``POST /api/generate``."""

    model: str
    prompt: str
    suffix: Optional[str] = None
    stream: bool = False
    format: Optional[str] = None
    options: Optional[NativeOptions] = None


class NativeShowRequest(BaseModel):
    """Body for ``POST /api/show``."""

    model: str
