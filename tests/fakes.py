"""Test doubles for the native service."""

import json
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Tuple

from openai_compat.services.native import NativeEndpoint, NativeResponse

Responder = Callable[[Any], Any]


class FakeNativeHandler:
    """In-process stand-in for the native service.

    Each endpoint is answered by a responder that receives the translated
    native request. A responder may return a ``NativeResponse`` or a plain
    dict, which is sent back as a 200 JSON body.
    """

    def __init__(self):
        self.responders: Dict[NativeEndpoint, Responder] = {}
        self.calls: List[Tuple[NativeEndpoint, Any]] = []

    def on(self, endpoint: NativeEndpoint, responder: Responder) -> "FakeNativeHandler":
        self.responders[endpoint] = responder
        return self

    async def handle(self, endpoint: NativeEndpoint, payload: Optional[Any] = None) -> NativeResponse:
        self.calls.append((endpoint, payload))
        responder = self.responders.get(endpoint)
        if responder is None:
            return NativeResponse.from_json({"error": f"no responder for {endpoint.path}"}, 404)
        result = responder(payload)
        if isinstance(result, NativeResponse):
            return result
        return NativeResponse.from_json(result)

    def last_payload(self, endpoint: NativeEndpoint) -> Any:
        for called, payload in reversed(self.calls):
            if called is endpoint:
                return payload
        raise AssertionError(f"{endpoint.path} was never called")


class RecordingStream:
    """Async iterator over native events that records how it was consumed."""

    def __init__(self, events: List[Dict[str, Any]]):
        self.events = list(events)
        self.consumed = 0
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self) -> Dict[str, Any]:
        if self.closed or self.consumed >= len(self.events):
            raise StopAsyncIteration
        event = self.events[self.consumed]
        self.consumed += 1
        if isinstance(event, Exception):
            raise event
        return event

    async def aclose(self) -> None:
        self.closed = True


async def event_stream(events: List[Dict[str, Any]]) -> AsyncIterator[Dict[str, Any]]:
    """Native NDJSON events as an async generator."""
    for event in events:
        yield event


def chat_events(*texts: str, done_reason: str = "stop", **final: Any) -> List[Dict[str, Any]]:
    """Native ``/api/chat`` stream: one event per text, then the done event."""
    events = [
        {"model": "test-model", "message": {"role": "assistant", "content": t}, "done": False}
        for t in texts
    ]
    events.append(
        {
            "model": "test-model",
            "message": {"role": "assistant", "content": ""},
            "done": True,
            "done_reason": done_reason,
            **final,
        }
    )
    return events


def generate_events(*texts: str, done_reason: str = "stop", **final: Any) -> List[Dict[str, Any]]:
    """Native ``/api/generate`` stream: one event per text, then the done event."""
    events = [{"model": "test-model", "response": t, "done": False} for t in texts]
    events.append(
        {"model": "test-model", "response": "", "done": True, "done_reason": done_reason, **final}
    )
    return events


def parse_sse(lines: List[str]) -> Tuple[List[Dict[str, Any]], List[str]]:
    """Split SSE ``data:`` lines into JSON payloads and raw data strings."""
    raw = [line[len("data: "):] for line in lines if line.startswith("data: ")]
    payloads = [json.loads(data) for data in raw if data != "[DONE]"]
    return payloads, raw
