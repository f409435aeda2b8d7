"""Exceptions raised by the translation engine."""

from typing import Any, Dict


class TranslationError(Exception):
    """Base class for translation failures."""


class MalformedRequestError(TranslationError):
    """Inbound public request cannot be translated.

    Always reported to the caller as a 400 before the native service is called.
    """

    status_code = 400
    error_type = "invalid_request_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_openai(self) -> Dict[str, Any]:
        return openai_error_body(self.message, self.error_type)


class MalformedContentError(MalformedRequestError):
    """A message content part cannot be normalized (bad tag or image payload)."""


class NativeStreamError(TranslationError):
    """The native service failed after streaming began."""


class StreamStateError(TranslationError):
    """A streaming reassembler received input after it terminated."""


def openai_error_body(message: str, error_type: str = "api_error") -> Dict[str, Any]:
    """Build the public-schema error payload."""
    return {"error": {"message": message, "type": error_type}}
