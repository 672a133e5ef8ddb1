"""Tests for the upstream HTTP clients (httpx MockTransport, no network)."""

import asyncio
import json

import httpx
import pytest

from fitquest.clients import GenerationClient, VideoSearchClient, with_retries
from fitquest.errors import GenerationParseError, UpstreamUnavailable


def generation_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class Recorder:
    """MockTransport handler that replays responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class TestWithRetries:
    """Tests for the retry/backoff helper."""

    def _run(self, recorder, max_retries=3):
        delays = []

        async def sleep(seconds):
            delays.append(seconds)

        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
                return await with_retries(
                    lambda: client.get("https://upstream.test/"),
                    service="test service",
                    max_retries=max_retries,
                    base_delay=0.5,
                    sleep=sleep,
                )

        return asyncio.run(run()), delays

    def test_success_first_try(self):
        recorder = Recorder(httpx.Response(200, json={"ok": True}))
        response, delays = self._run(recorder)
        assert response.json() == {"ok": True}
        assert delays == []

    def test_retries_rate_limit_with_backoff(self):
        recorder = Recorder(
            httpx.Response(429),
            httpx.Response(503),
            httpx.Response(200, json={"ok": True}),
        )
        response, delays = self._run(recorder)
        assert response.status_code == 200
        assert delays == [0.5, 1.0]
        assert len(recorder.requests) == 3

    def test_retries_transport_errors(self):
        recorder = Recorder(httpx.ConnectError("refused"), httpx.Response(200))
        response, _ = self._run(recorder)
        assert response.status_code == 200

    def test_gives_up_after_max_retries(self):
        recorder = Recorder(*[httpx.Response(500) for _ in range(3)])
        with pytest.raises(UpstreamUnavailable) as exc_info:
            self._run(recorder, max_retries=2)
        assert exc_info.value.details["status"] == 500
        assert len(recorder.requests) == 3

    def test_client_error_is_not_retried(self):
        recorder = Recorder(httpx.Response(403), httpx.Response(200))
        with pytest.raises(UpstreamUnavailable):
            self._run(recorder)
        assert len(recorder.requests) == 1


class TestGenerationClient:
    """Tests for GenerationClient."""

    def _client(self, recorder, api_key="test-key"):
        return GenerationClient(
            api_key=api_key,
            model="test-model",
            base_url="https://generation.test/v1beta",
            retry_delay=0,
            transport=httpx.MockTransport(recorder),
        )

    def test_returns_reply_text(self):
        recorder = Recorder(httpx.Response(200, json=generation_reply('  {"programName": "x"}\n')))

        text = asyncio.run(self._client(recorder).generate("Make me a plan"))

        assert text == '{"programName": "x"}'
        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/v1beta/models/test-model:generateContent"
        assert request.url.params["key"] == "test-key"
        body = json.loads(request.content)
        prompt = body["contents"][0]["parts"][0]["text"]
        assert prompt.startswith("You are a professional fitness trainer.")
        assert prompt.endswith("Make me a plan")
        assert body["generationConfig"]["temperature"] == 0.3

    def test_unexpected_shape(self):
        recorder = Recorder(httpx.Response(200, json={"candidates": []}))
        with pytest.raises(GenerationParseError):
            asyncio.run(self._client(recorder).generate("plan"))

    def test_not_configured(self):
        recorder = Recorder()
        with pytest.raises(UpstreamUnavailable):
            asyncio.run(self._client(recorder, api_key=None).generate("plan"))
        assert recorder.requests == []

    def test_retries_then_succeeds(self):
        recorder = Recorder(
            httpx.Response(503),
            httpx.Response(200, json=generation_reply("{}")),
        )
        assert asyncio.run(self._client(recorder).generate("plan")) == "{}"


class TestVideoSearchClient:
    """Tests for VideoSearchClient."""

    def _client(self, recorder, api_key="yt-key"):
        return VideoSearchClient(
            api_key=api_key,
            base_url="https://video.test/youtube/v3",
            retry_delay=0,
            transport=httpx.MockTransport(recorder),
        )

    def test_first_result(self):
        recorder = Recorder(
            httpx.Response(
                200,
                json={"items": [{"id": {"videoId": "abc123"}, "snippet": {"title": "How to squat"}}]},
            )
        )

        result = asyncio.run(self._client(recorder).search("squat exercise tutorial"))

        assert result.video_id == "abc123"
        assert result.title == "How to squat"
        params = recorder.requests[0].url.params
        assert params["q"] == "squat exercise tutorial"
        assert params["maxResults"] == "1"
        assert params["type"] == "video"

    def test_no_results(self):
        recorder = Recorder(httpx.Response(200, json={"items": []}))
        assert asyncio.run(self._client(recorder).search("nothing")) is None

    def test_disabled_without_key(self):
        client = self._client(Recorder(), api_key=None)
        assert client.enabled is False
        assert asyncio.run(client.search("squat")) is None
