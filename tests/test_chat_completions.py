"""Tests for OpenAI chat completions endpoint."""

import pytest
from fastapi.testclient import TestClient

from openai_compat.models.native import NativeChatRequest
from openai_compat.services.native import NativeEndpoint, NativeResponse

from fakes import FakeNativeHandler, chat_events, event_stream, parse_sse


def native_reply(content: str, **fields) -> dict:
    return {
        "model": "test-model",
        "created_at": "2024-06-01T12:00:00.000000Z",
        "message": {"role": "assistant", "content": content},
        "done": True,
        "done_reason": "stop",
        **fields,
    }


def streaming(*events):
    return lambda payload: NativeResponse.from_events(event_stream(list(events)))


class TestChatCompletionsValidation:
    """Test request validation for chat completions."""

    def test_missing_model(self, client: TestClient, native: FakeNativeHandler):
        response = client.post(
            "/v1/chat/completions",
            json={"messages": [{"role": "user", "content": "test"}]},
        )
        assert response.status_code == 400
        assert native.calls == []

    def test_missing_messages(self, client: TestClient, native: FakeNativeHandler):
        response = client.post("/v1/chat/completions", json={"model": "test-model"})
        assert response.status_code == 400
        assert native.calls == []

    def test_empty_messages(self, client: TestClient, native: FakeNativeHandler):
        response = client.post(
            "/v1/chat/completions", json={"model": "test-model", "messages": []}
        )
        assert response.status_code == 400
        assert native.calls == []

    def test_invalid_role(self, client: TestClient, native: FakeNativeHandler):
        response = client.post(
            "/v1/chat/completions",
            json={"model": "test-model", "messages": [{"role": "invalid", "content": "test"}]},
        )
        assert response.status_code == 400
        assert response.json()["error"]["type"] == "invalid_request_error"
        assert native.calls == []


class TestChatCompletionsNonStreaming:
    """Test non-streaming chat completions."""

    def test_simple_completion(
        self, client: TestClient, native: FakeNativeHandler, simple_chat_request: dict
    ):
        native.on(NativeEndpoint.CHAT, lambda payload: native_reply("Hello!"))

        response = client.post("/v1/chat/completions", json=simple_chat_request)
        assert response.status_code == 200

        data = response.json()
        assert data["object"] == "chat.completion"
        assert data["id"].startswith("chatcmpl-")
        assert data["model"] == "test-model"
        assert isinstance(data["created"], int)
        assert data["choices"][0]["message"] == {"role": "assistant", "content": "Hello!"}
        assert data["choices"][0]["finish_reason"] == "stop"

    def test_native_request_translated(
        self, client: TestClient, native: FakeNativeHandler, simple_chat_request: dict
    ):
        native.on(NativeEndpoint.CHAT, lambda payload: native_reply("Hello!"))

        client.post("/v1/chat/completions", json=simple_chat_request)

        payload = native.last_payload(NativeEndpoint.CHAT)
        assert isinstance(payload, NativeChatRequest)
        assert payload.model == "test-model"
        assert payload.stream is False
        assert [(m.role, m.content) for m in payload.messages] == [("user", "Hello")]

    def test_image_reaches_native_as_bytes(
        self,
        client: TestClient,
        native: FakeNativeHandler,
        png_image_b64: str,
        png_image_bytes: bytes,
    ):
        def reply(payload: NativeChatRequest) -> dict:
            if payload.messages[0].images != [png_image_bytes]:
                return NativeResponse.from_json({"error": "image mismatch"}, 400)
            return native_reply("Hello! Nice image.")

        native.on(NativeEndpoint.CHAT, reply)

        response = client.post(
            "/v1/chat/completions",
            json={
                "model": "test-model",
                "messages": [
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": "Hello"},
                            {
                                "type": "image_url",
                                "image_url": {"url": f"data:image/png;base64,{png_image_b64}"},
                            },
                        ],
                    }
                ],
            },
        )
        assert response.status_code == 200
        assert response.json()["choices"][0]["message"]["content"] == "Hello! Nice image."

    def test_usage_from_native_counts(
        self, client: TestClient, native: FakeNativeHandler, simple_chat_request: dict
    ):
        native.on(
            NativeEndpoint.CHAT,
            lambda payload: native_reply("Hello!", prompt_eval_count=12, eval_count=3),
        )

        data = client.post("/v1/chat/completions", json=simple_chat_request).json()
        assert data["usage"] == {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15}

    def test_usage_omitted_without_counts(
        self, client: TestClient, native: FakeNativeHandler, simple_chat_request: dict
    ):
        native.on(NativeEndpoint.CHAT, lambda payload: native_reply("Hello!"))

        data = client.post("/v1/chat/completions", json=simple_chat_request).json()
        assert "usage" not in data

    def test_usage_estimated_when_enabled(
        self,
        client: TestClient,
        native: FakeNativeHandler,
        simple_chat_request: dict,
        monkeypatch: pytest.MonkeyPatch,
    ):
        from openai_compat.config import settings

        monkeypatch.setattr(settings, "ESTIMATE_USAGE", True)
        native.on(NativeEndpoint.CHAT, lambda payload: native_reply("Hello there friend"))

        data = client.post("/v1/chat/completions", json=simple_chat_request).json()
        assert data["usage"] == {
            "prompt_tokens": 1,
            "completion_tokens": 3,
            "total_tokens": 4,
            "estimated": True,
        }

    def test_length_finish_reason(
        self, client: TestClient, native: FakeNativeHandler, simple_chat_request: dict
    ):
        native.on(NativeEndpoint.CHAT, lambda payload: native_reply("Hel", done_reason="length"))

        data = client.post("/v1/chat/completions", json=simple_chat_request).json()
        assert data["choices"][0]["finish_reason"] == "length"

    def test_ids_differ_between_requests(
        self, client: TestClient, native: FakeNativeHandler, simple_chat_request: dict
    ):
        native.on(NativeEndpoint.CHAT, lambda payload: native_reply("Hello!"))

        first = client.post("/v1/chat/completions", json=simple_chat_request).json()
        second = client.post("/v1/chat/completions", json=simple_chat_request).json()
        assert first["id"] != second["id"]


class TestChatCompletionsStreaming:
    """Test streaming chat completions."""

    def stream_lines(self, client: TestClient, body: dict):
        with client.stream("POST", "/v1/chat/completions", json=body) as response:
            assert response.status_code == 200
            assert response.headers["content-type"].startswith("text/event-stream")
            return list(response.iter_lines())

    def test_streaming_response(
        self, client: TestClient, native: FakeNativeHandler, streaming_chat_request: dict
    ):
        native.on(NativeEndpoint.CHAT, streaming(*chat_events("Hel", "lo", "!")))

        chunks, raw = parse_sse(self.stream_lines(client, streaming_chat_request))

        assert raw[-1] == "[DONE]"
        assert all(c["object"] == "chat.completion.chunk" for c in chunks)
        assert "".join(c["choices"][0]["delta"].get("content", "") for c in chunks) == "Hello!"

    def test_native_request_is_streaming(
        self, client: TestClient, native: FakeNativeHandler, streaming_chat_request: dict
    ):
        native.on(NativeEndpoint.CHAT, streaming(*chat_events("Hi")))

        self.stream_lines(client, streaming_chat_request)
        assert native.last_payload(NativeEndpoint.CHAT).stream is True

    def test_identity_stable_across_chunks(
        self, client: TestClient, native: FakeNativeHandler, streaming_chat_request: dict
    ):
        native.on(NativeEndpoint.CHAT, streaming(*chat_events("a", "b", "c")))

        chunks, _ = parse_sse(self.stream_lines(client, streaming_chat_request))

        assert len({c["id"] for c in chunks}) == 1
        assert len({c["created"] for c in chunks}) == 1
        assert {c["model"] for c in chunks} == {"test-model"}
        assert chunks[0]["id"].startswith("chatcmpl-")

    def test_role_announced_first(
        self, client: TestClient, native: FakeNativeHandler, streaming_chat_request: dict
    ):
        native.on(NativeEndpoint.CHAT, streaming(*chat_events("Hel", "lo")))

        chunks, _ = parse_sse(self.stream_lines(client, streaming_chat_request))

        assert chunks[0]["choices"][0]["delta"] == {"role": "assistant", "content": "Hel"}
        assert all("role" not in c["choices"][0]["delta"] for c in chunks[1:])

    def test_single_finish_reason_on_last_chunk(
        self, client: TestClient, native: FakeNativeHandler, streaming_chat_request: dict
    ):
        native.on(NativeEndpoint.CHAT, streaming(*chat_events("a", "b")))

        chunks, _ = parse_sse(self.stream_lines(client, streaming_chat_request))

        reasons = [c["choices"][0]["finish_reason"] for c in chunks]
        assert reasons[-1] == "stop"
        assert all(r is None for r in reasons[:-1])
        assert chunks[-1]["choices"][0]["delta"] == {}

    def test_usage_on_terminal_chunk(
        self, client: TestClient, native: FakeNativeHandler, streaming_chat_request: dict
    ):
        native.on(
            NativeEndpoint.CHAT,
            streaming(*chat_events("a", "b", prompt_eval_count=4, eval_count=2)),
        )

        chunks, _ = parse_sse(self.stream_lines(client, streaming_chat_request))

        assert chunks[-1]["usage"] == {"prompt_tokens": 4, "completion_tokens": 2, "total_tokens": 6}
        assert all("usage" not in c for c in chunks[:-1])

    def test_empty_events_produce_no_chunks(
        self, client: TestClient, native: FakeNativeHandler, streaming_chat_request: dict
    ):
        native.on(NativeEndpoint.CHAT, streaming(*chat_events("a", "", "", "b")))

        chunks, _ = parse_sse(self.stream_lines(client, streaming_chat_request))

        # role chunk, "b", terminal
        assert len(chunks) == 3

    def test_native_failure_mid_stream(
        self, client: TestClient, native: FakeNativeHandler, streaming_chat_request: dict
    ):
        events = chat_events("a")[:-1] + [{"error": "model crashed"}]
        native.on(NativeEndpoint.CHAT, streaming(*events))

        chunks, raw = parse_sse(self.stream_lines(client, streaming_chat_request))

        assert "[DONE]" not in raw
        assert chunks[-1] == {"error": {"message": "model crashed", "type": "api_error"}}
        assert all(c["choices"][0]["finish_reason"] is None for c in chunks[:-1])

    def test_native_error_before_stream_passes_through(
        self, client: TestClient, native: FakeNativeHandler, streaming_chat_request: dict
    ):
        native.on(
            NativeEndpoint.CHAT,
            lambda payload: NativeResponse.from_json({"error": "model 'x' not found"}, 404),
        )

        response = client.post("/v1/chat/completions", json=streaming_chat_request)
        assert response.status_code == 404
        assert response.json() == {"error": "model 'x' not found"}
