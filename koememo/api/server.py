"""aiohttp application exposing the transcription endpoint."""

import json
import logging

from aiohttp import web
from pydantic import ValidationError

from ..exceptions import KoememoError
from ..transcription.base import AbstractTranscriptionBackend
from .models import ErrorResponse, TranscribeRequest, TranscribeResponse

logger = logging.getLogger(__name__)

BACKEND_KEY = web.AppKey("backend", AbstractTranscriptionBackend)


def _error(message: str, status: int) -> web.Response:
    return web.json_response(ErrorResponse(error=message).model_dump(), status=status)


async def handle_transcribe(request: web.Request) -> web.Response:
    """POST /api/transcribe: {audioData, mimeType} -> {transcription}."""
    try:
        body = await request.json()
    except json.JSONDecodeError:
        return _error("Request body must be JSON", 400)

    try:
        payload = TranscribeRequest.model_validate(body)
    except ValidationError:
        return _error("audioData and mimeType are required", 400)

    logger.info(f"Transcription request: {payload.mime_type}, {len(payload.audio_data)} base64 chars")
    backend = request.app[BACKEND_KEY]
    try:
        text = await backend.transcribe(payload.audio_data, payload.mime_type)
    except KoememoError as e:
        logger.error(f"Transcription request failed: {e}")
        return _error(str(e), 500)
    except Exception as e:
        logger.exception("Unexpected error while transcribing")
        return _error(f"Unexpected error: {e}", 500)

    return web.json_response(TranscribeResponse(transcription=text).model_dump(), status=200)


async def _close_backend(app: web.Application) -> None:
    await app[BACKEND_KEY].cleanup()


def create_app(backend: AbstractTranscriptionBackend) -> web.Application:
    """Build the aiohttp application around a transcription backend."""
    app = web.Application()
    app[BACKEND_KEY] = backend
    app.router.add_post("/api/transcribe", handle_transcribe)
    app.on_cleanup.append(_close_backend)
    return app
