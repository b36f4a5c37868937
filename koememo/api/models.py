"""Request/response models for the HTTP API."""

from pydantic import BaseModel, ConfigDict, Field


class TranscribeRequest(BaseModel):
    """Body of POST /api/transcribe."""
    model_config = ConfigDict(populate_by_name=True)

    audio_data: str = Field(..., alias="audioData", min_length=1, description="Base64 audio")
    mime_type: str = Field(..., alias="mimeType", min_length=1, description="Audio MIME type")


class TranscribeResponse(BaseModel):
    transcription: str


class ErrorResponse(BaseModel):
    error: str
