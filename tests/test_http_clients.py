"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from nutrition_sync.adapters.openai_assistant_client import OpenAIAssistantClient
from nutrition_sync.adapters.remote_store_client import HttpxRemoteStoreClient
from nutrition_sync.domain.chat import ChatMessage
from nutrition_sync.domain.logs import DEFAULT_TARGETS, DailyLog

DOCUMENT = {
    "history": {"2026-03-14": {"calories": 800, "waterIntake": 500}},
    "targets": {"calories": 2500, "waterTarget": 2500},
}


def _client(handler) -> HttpxRemoteStoreClient:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return HttpxRemoteStoreClient(
        base_url="https://sync.example.com",
        http_client=httpx.AsyncClient(transport=transport),
    )


def test_fetch_remote_parses_document() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/sync"
        return httpx.Response(200, json=DOCUMENT)

    state = asyncio.run(_client(handler).fetch_remote())

    assert state is not None
    assert state.history["2026-03-14"].water_intake == 500
    assert state.targets.calories == 2500


def test_fetch_remote_not_found_reads_as_absent() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"detail": "No data"})

    assert asyncio.run(_client(handler).fetch_remote()) is None


def test_fetch_remote_network_error_reads_as_absent() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    assert asyncio.run(_client(handler).fetch_remote()) is None


def test_fetch_remote_malformed_body_reads_as_absent() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    assert asyncio.run(_client(handler).fetch_remote()) is None


def test_push_remote_posts_whole_document() -> None:
    seen: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/sync"
        seen.append(json.loads(request.content.decode()))
        return httpx.Response(200, json={"success": True})

    history = {"2026-03-14": DailyLog(water_intake=750)}
    result = asyncio.run(_client(handler).push_remote(history, DEFAULT_TARGETS))

    assert result is True
    assert seen[0]["history"] == {
        "2026-03-14": history["2026-03-14"].model_dump(
            mode="json", by_alias=True, exclude_none=True
        )
    }
    assert seen[0]["targets"]["waterTarget"] == 3000


def test_push_remote_reports_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"detail": "boom"})

    history = {"2026-03-14": DailyLog(water_intake=750)}
    assert asyncio.run(_client(handler).push_remote(history, DEFAULT_TARGETS)) is False


def test_push_remote_network_error_reports_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    history = {"2026-03-14": DailyLog()}
    assert asyncio.run(_client(handler).push_remote(history, DEFAULT_TARGETS)) is False


def test_create_strips_trailing_slash() -> None:
    client = HttpxRemoteStoreClient.create("https://sync.example.com/")

    assert client.sync_url == "https://sync.example.com/sync"
    asyncio.run(client.close())


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str = "Looks tasty!") -> None:
        self.responses = _FakeResponses(output_text)


def test_openai_assistant_client_builds_input_items() -> None:
    fake = _FakeOpenAI()
    client = OpenAIAssistantClient(client=fake)

    result = asyncio.run(
        client.complete(
            model="gpt-5.2",
            reasoning_effort="low",
            store=False,
            instructions="Track food",
            messages=[
                ChatMessage(id="1", role="model", text="Hi!"),
                ChatMessage(
                    id="2", role="user", text="Lunch", image=b"\x89PNG\r\n\x1a\nrest"
                ),
            ],
        )
    )

    assert result == "Looks tasty!"
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["reasoning"] == {"effort": "low"}
    assistant_item, user_item = payload["input"]
    assert assistant_item == {"role": "assistant", "content": "Hi!"}
    assert user_item["content"][0] == {"type": "input_text", "text": "Lunch"}
    assert user_item["content"][1]["image_url"].startswith("data:image/png;base64,")


def test_openai_assistant_client_rejects_empty_output() -> None:
    client = OpenAIAssistantClient(client=_FakeOpenAI(output_text=""))

    with pytest.raises(RuntimeError, match="empty"):
        asyncio.run(
            client.complete(
                model="gpt-5.2",
                reasoning_effort=None,
                store=False,
                instructions="Track food",
                messages=[ChatMessage(id="1", role="user", text="Hi")],
            )
        )
