"""Base64 transport encoding for recorded audio."""

import io
import base64
import binascii
import logging

from ..exceptions import DecodeError
from ..models.audio import AudioArtifact

logger = logging.getLogger(__name__)


def to_data_url(artifact: AudioArtifact) -> str:
    """Read the artifact to completion and return it as a data URL."""
    with io.BytesIO(artifact.data) as stream:
        raw = stream.read()
    if not isinstance(raw, bytes):
        raise DecodeError(f"Audio payload read returned {type(raw).__name__}, expected bytes")
    encoded = base64.b64encode(raw).decode('ascii')
    return f"data:{artifact.mime_type};base64,{encoded}"


def encode(artifact: AudioArtifact) -> str:
    """Encode an audio artifact as a bare base64 string for JSON APIs.

    Raises:
        DecodeError: the payload is not bytes or encodes to nothing
    """
    if not isinstance(artifact.data, (bytes, bytearray)):
        raise DecodeError(f"Audio payload must be bytes, got {type(artifact.data).__name__}")

    data_url = to_data_url(AudioArtifact(data=bytes(artifact.data), mime_type=artifact.mime_type))
    _, _, payload = data_url.partition(',')
    if not payload:
        raise DecodeError("Base64 conversion produced an empty payload")

    logger.debug(f"Encoded {artifact.size} bytes of {artifact.mime_type} to {len(payload)} base64 chars")
    return payload


def decode(payload: str) -> bytes:
    """Decode a base64 payload (optionally a full data URL) back to bytes."""
    if payload.startswith("data:"):
        _, _, payload = payload.partition(',')
    if not payload:
        raise DecodeError("Base64 payload is empty")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 audio payload: {e}") from e
