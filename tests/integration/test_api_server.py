"""Integration tests for the /api/transcribe endpoint."""

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer

from koememo.api.server import create_app
from koememo.exceptions import NoSpeechDetectedError, TranscriptionError
from koememo.transcription.gemini_backend import GeminiTranscriptionBackend
from koememo.transcription.gemini_client import GeminiClient


def gemini_app(response):
    async def handle(request):
        return response()

    app = web.Application()
    app.router.add_post("/v1beta/models/{model_action}", handle)
    return app


async def post(backend, **kwargs):
    async with TestClient(TestServer(create_app(backend))) as client:
        response = await client.post("/api/transcribe", **kwargs)
        return response.status, await response.json()


@pytest.mark.integration
class TestTranscribeEndpoint:

    @pytest.mark.asyncio
    async def test_success(self, fake_backend):
        status, body = await post(fake_backend, json={"audioData": "UklGRg==", "mimeType": "audio/webm"})

        assert status == 200
        assert body == {"transcription": fake_backend.transcript}
        assert fake_backend.calls == [("UklGRg==", "audio/webm")]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"mimeType": "audio/webm"},
        {"audioData": "UklGRg=="},
        {"audioData": "", "mimeType": "audio/webm"},
        {},
    ])
    async def test_missing_fields(self, fake_backend, payload):
        status, body = await post(fake_backend, json=payload)

        assert status == 400
        assert "error" in body
        assert fake_backend.calls == []

    @pytest.mark.asyncio
    async def test_invalid_json(self, fake_backend):
        status, body = await post(fake_backend, data="not json",
                                  headers={"Content-Type": "application/json"})

        assert status == 400
        assert "error" in body

    @pytest.mark.asyncio
    async def test_transcription_error(self, fake_backend):
        fake_backend.error = TranscriptionError("Gemini transcription request failed: 500")
        status, body = await post(fake_backend, json={"audioData": "UklGRg==", "mimeType": "audio/wav"})

        assert status == 500
        assert body == {"error": "Gemini transcription request failed: 500"}

    @pytest.mark.asyncio
    async def test_no_speech(self, fake_backend):
        fake_backend.error = NoSpeechDetectedError("no speech was recognised")
        status, body = await post(fake_backend, json={"audioData": "UklGRg==", "mimeType": "audio/wav"})

        assert status == 500
        assert "no speech" in body["error"]

    @pytest.mark.asyncio
    async def test_backend_cleaned_up(self, fake_backend):
        await post(fake_backend, json={"audioData": "UklGRg==", "mimeType": "audio/wav"})
        assert fake_backend.cleaned_up is True

    @pytest.mark.asyncio
    async def test_unexpected_backend_error(self, fake_backend):
        fake_backend.error = RuntimeError("socket closed")
        status, body = await post(fake_backend, json={"audioData": "UklGRg==", "mimeType": "audio/wav"})

        assert status == 500
        assert body == {"error": "Unexpected error: socket closed"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        lambda: web.json_response([]),
        lambda: web.json_response({"candidates": ["x"]}),
        lambda: web.Response(text="<html>Bad Gateway</html>", content_type="text/html"),
    ])
    async def test_malformed_gemini_response(self, response):
        async with TestServer(gemini_app(response)) as gemini:
            client = GeminiClient(api_key="test-key", model="gemini-test",
                                  base_url=str(gemini.make_url("/v1beta")))
            backend = GeminiTranscriptionBackend(client)
            status, body = await post(backend, json={"audioData": "UklGRg==", "mimeType": "audio/webm"})

        assert status == 500
        assert "Gemini" in body["error"]

    @pytest.mark.asyncio
    async def test_blocked_gemini_response(self):
        def response():
            return web.json_response({"promptFeedback": {"blockReason": "SAFETY"}})

        async with TestServer(gemini_app(response)) as gemini:
            client = GeminiClient(api_key="test-key", model="gemini-test",
                                  base_url=str(gemini.make_url("/v1beta")))
            status, body = await post(GeminiTranscriptionBackend(client),
                                      json={"audioData": "UklGRg==", "mimeType": "audio/webm"})

        assert status == 500
        assert "SAFETY" in body["error"]
