"""Native service capability and its HTTP implementation.

Routes never talk HTTP to the native service directly; they call whatever
``NativeHandler`` the application was given. In production that is
``HttpNativeHandler``; tests substitute an in-process fake.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Dict, Optional, Protocol

import httpx
from fastapi import Request
from fastapi.responses import Response
from pydantic import BaseModel

from ..config import settings
from ..errors import NativeStreamError
from ..utils.debug_logger import log_native_request, log_native_response

logger = logging.getLogger(__name__)


class NativeEndpoint(Enum):
    """The closed set of native operations the shim uses."""

    CHAT = ("POST", "/api/chat")
    GENERATE = ("POST", "/api/generate")
    LIST = ("GET", "/api/tags")
    SHOW = ("POST", "/api/show")

    def __init__(self, method: str, path: str):
        self.method = method
        self.path = path


@dataclass
class NativeResponse:
    """Outcome of one native call.

    A successful streaming call carries ``events`` (parsed NDJSON objects, in
    order); every other outcome carries the complete ``body``.
    """

    status_code: int
    body: bytes = b""
    media_type: str = "application/json"
    events: Optional[AsyncIterator[Dict[str, Any]]] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.body) if self.body else {}

    def passthrough(self) -> Response:
        """The native response as-is: status, body bytes and content type."""
        return Response(content=self.body, status_code=self.status_code, media_type=self.media_type)

    def iter_events(self) -> AsyncIterator[Dict[str, Any]]:
        """Native events in order; a complete body counts as one final event."""
        if self.events is not None:
            return self.events
        return _single_event(self.json())

    @classmethod
    def from_json(cls, payload: Any, status_code: int = 200) -> "NativeResponse":
        return cls(status_code=status_code, body=json.dumps(payload).encode("utf-8"))

    @classmethod
    def from_events(
        cls, events: AsyncIterator[Dict[str, Any]], status_code: int = 200
    ) -> "NativeResponse":
        return cls(status_code=status_code, media_type="application/x-ndjson", events=events)


async def _single_event(payload: Dict[str, Any]) -> AsyncIterator[Dict[str, Any]]:
    yield payload


class NativeHandler(Protocol):
    """Anything that accepts a native request and produces a native response."""

    async def handle(
        self, endpoint: NativeEndpoint, payload: Optional[BaseModel] = None
    ) -> NativeResponse:
        ...


class HttpNativeHandler:
    """Calls the native service over HTTP."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the HTTP handler.

        Args:
            base_url: Native service root, e.g. http://localhost:11434
            timeout: Per-request timeout in seconds
            client: Pre-built client (tests pass one with a mock transport)
        """
        self.base_url = (base_url or settings.NATIVE_BASE_URL).rstrip("/")
        self.client = client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.NATIVE_TIMEOUT
        )

    async def handle(
        self, endpoint: NativeEndpoint, payload: Optional[BaseModel] = None
    ) -> NativeResponse:
        """
        Send one request to the native service.

        Non-2xx responses are returned with their body untouched so the
        caller can forward them verbatim.
        """
        stream = bool(getattr(payload, "stream", False))
        content = payload.model_dump_json(exclude_none=True) if payload is not None else None

        request = self.client.build_request(
            endpoint.method,
            f"{self.base_url}{endpoint.path}",
            content=content,
            headers={"Content-Type": "application/json"} if content is not None else None,
        )
        log_native_request(endpoint.path, content)

        response = await self.client.send(request, stream=stream)
        media_type = response.headers.get("content-type", "application/json")

        if stream and response.is_success:
            logger.debug(f"Native stream opened: {endpoint.method} {endpoint.path}")
            return NativeResponse(
                status_code=response.status_code,
                media_type=media_type,
                events=self._iter_events(response),
            )

        if stream:
            try:
                await response.aread()
            finally:
                await response.aclose()

        if not response.is_success:
            logger.warning(
                f"Native {endpoint.method} {endpoint.path} failed with {response.status_code}"
            )
        log_native_response(endpoint.path, response.status_code, response.content)
        return NativeResponse(
            status_code=response.status_code,
            body=response.content,
            media_type=media_type,
        )

    @staticmethod
    async def _iter_events(response: httpx.Response) -> AsyncIterator[Dict[str, Any]]:
        """Yield NDJSON events; closing this iterator closes the native stream."""
        try:
            async for line in response.aiter_lines():
                line = line.strip()
                if not line:
                    continue
                try:
                    event = json.loads(line)
                except json.JSONDecodeError as e:
                    raise NativeStreamError(f"malformed native stream event: {e}") from e
                yield event
        finally:
            await response.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()


def get_native_handler(request: Request) -> NativeHandler:
    """FastAPI dependency resolving the application's native handler."""
    return request.app.state.native_handler
