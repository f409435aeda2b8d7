"""OpenAI content types for chat messages."""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


class TextContent(BaseModel):
    """Text content block."""

    type: Literal["text"] = "text"
    text: str


class ImageUrl(BaseModel):
    """Image URL specification."""

    url: str  # data:image/png;base64,... (remote URLs are rejected)
    # Not forwarded; any hint is accepted
    detail: Optional[str] = "auto"


class ImageUrlContent(BaseModel):
    """Image URL content block."""

    type: Literal["image_url"] = "image_url"
    image_url: ImageUrl

    @field_validator("image_url", mode="before")
    @classmethod
    def accept_bare_url(cls, v):
        """Some clients send ``image_url`` as a plain string."""
        if isinstance(v, str):
            return {"url": v}
        return v


ContentPart = Annotated[Union[TextContent, ImageUrlContent], Field(discriminator="type")]
