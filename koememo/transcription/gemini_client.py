"""Gemini generateContent client used for both transcription and correction."""

import asyncio
import logging
import aiohttp
from typing import Any, Dict, List, Optional

from ..exceptions import ContentBlockedError, MissingCredentialError, ProviderAPIError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.0-flash"

SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
]

# finishReason values meaning the answer was withheld
BLOCKED_FINISH_REASONS = ("SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII")


class GeminiClient:
    """Thin REST client for the Gemini generateContent endpoint.

    Construct one instance at start-up and hand it to every component that
    needs the model.
    """

    def __init__(self,
                 api_key: Optional[str],
                 model: str = DEFAULT_MODEL,
                 base_url: str = DEFAULT_BASE_URL,
                 top_k: int = 32,
                 top_p: float = 0.95,
                 max_output_tokens: int = 2048,
                 timeout_seconds: float = 60.0):
        """Initialize Gemini client.

        Args:
            api_key: Gemini API key
            model: Model identifier (e.g. 'gemini-2.0-flash')
            base_url: API root, overridable for tests and proxies
            top_k: Sampling top-k
            top_p: Sampling nucleus probability
            max_output_tokens: Response length limit
            timeout_seconds: Total timeout per request
        """
        if not api_key:
            raise MissingCredentialError("Gemini API key is not configured (set GEMINI_API_KEY)")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip('/')
        self.top_k = top_k
        self.top_p = top_p
        self.max_output_tokens = max_output_tokens
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

        logger.info(f"GeminiClient initialized with model: {model}")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def build_request(self, parts: List[Dict[str, Any]], temperature: float) -> Dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": parts}],
            "safetySettings": SAFETY_SETTINGS,
            "generationConfig": {
                "temperature": temperature,
                "topK": self.top_k,
                "topP": self.top_p,
                "maxOutputTokens": self.max_output_tokens,
            },
        }

    async def generate_content(self, parts: List[Dict[str, Any]], temperature: float = 0.0) -> str:
        """Send content parts to the model and return its text output.

        Returns:
            Concatenated text of the first candidate ('' when there is none)

        Raises:
            ContentBlockedError: the safety filters withheld the answer
            ProviderAPIError: non-200 status, a network failure or a malformed body
        """
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json"
        }
        data = self.build_request(parts, temperature)

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.endpoint, headers=headers, json=data) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        logger.error(f"Gemini API error: {response.status} - {error_text[:500]}")
                        raise ProviderAPIError(
                            f"Gemini API error: {response.status} - {error_text[:200]}",
                            status=response.status)
                    try:
                        result = await response.json(content_type=None)
                    except ValueError as e:
                        raise ProviderAPIError(f"Gemini API returned a non-JSON body: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ProviderAPIError(f"Gemini API request failed: {e}") from e

        return self._extract_text(result)

    async def send_prompt(self, prompt: str, temperature: float = 0.2) -> str:
        """Send a plain text prompt and return the response text."""
        return await self.generate_content([{"text": prompt}], temperature=temperature)

    def _extract_text(self, result: Any) -> str:
        """Pull the first candidate's text out of a generateContent response.

        Raises:
            ContentBlockedError: the safety filters blocked the prompt or the answer
            ProviderAPIError: the response does not have the generateContent shape
        """
        if not isinstance(result, dict):
            raise ProviderAPIError(f"Unexpected Gemini response: expected an object, got {type(result).__name__}")

        candidates = result.get("candidates") or []
        if not isinstance(candidates, list):
            raise ProviderAPIError("Unexpected Gemini response: 'candidates' is not a list")
        if not candidates:
            feedback = result.get("promptFeedback")
            block_reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
            if block_reason:
                logger.warning(f"Gemini blocked the prompt: {block_reason}")
                raise ContentBlockedError(f"Gemini blocked the prompt ({block_reason})", reason=block_reason)
            logger.warning("Gemini returned no candidates")
            return ""

        candidate = candidates[0]
        if not isinstance(candidate, dict):
            raise ProviderAPIError("Unexpected Gemini response: candidate is not an object")

        content = candidate.get("content") or {}
        parts = content.get("parts") if isinstance(content, dict) else None
        if parts is None:
            parts = []
        if not isinstance(parts, list) or not all(isinstance(part, dict) for part in parts):
            raise ProviderAPIError("Unexpected Gemini response: malformed content parts")
        text = "".join(str(part.get("text", "")) for part in parts)

        finish_reason = candidate.get("finishReason")
        if finish_reason in BLOCKED_FINISH_REASONS and not text.strip():
            logger.warning(f"Gemini withheld its answer: {finish_reason}")
            raise ContentBlockedError(f"Gemini withheld its answer ({finish_reason})", reason=finish_reason)
        if finish_reason and finish_reason not in ("STOP", "MAX_TOKENS"):
            logger.warning(f"Gemini finished with reason {finish_reason}")

        return text
