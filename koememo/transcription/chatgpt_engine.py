"""ChatGPT engine, an alternative text model for transcript correction."""

import asyncio
import logging
import aiohttp

from ..exceptions import MissingCredentialError, ProviderAPIError

logger = logging.getLogger(__name__)


class ChatGPTEngine:
    """Simple engine for sending prompts to ChatGPT and getting responses."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini",
                 base_url: str = "https://api.openai.com/v1/chat/completions",
                 max_tokens: int = 2048):
        """Initialize ChatGPT engine.

        Args:
            api_key: OpenAI API key
            model: ChatGPT model to use for correction
            base_url: Chat completions endpoint
            max_tokens: Maximum tokens in response
        """
        if not api_key:
            raise MissingCredentialError("OpenAI API key is not configured (set OPENAI_API_KEY)")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.max_tokens = max_tokens

        logger.info(f"ChatGPTEngine initialized with model: {model}")

    async def send_prompt(self, prompt: str, temperature: float = 0.2) -> str:
        """Send a prompt to ChatGPT and get the response.

        Args:
            prompt: Prompt to send to ChatGPT
            temperature: Temperature for response generation (0.0 to 1.0)

        Returns:
            Response text from ChatGPT ('' when the model returned no choice)

        Raises:
            ProviderAPIError: If API call fails
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        data = {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": prompt
                }
            ],
            "temperature": temperature,
            "max_tokens": self.max_tokens
        }

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.base_url, headers=headers, json=data) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise ProviderAPIError(
                            f"ChatGPT API error: {response.status} - {error_text[:200]}",
                            status=response.status)

                    try:
                        result = await response.json(content_type=None)
                    except ValueError as e:
                        raise ProviderAPIError(f"ChatGPT API returned a non-JSON body: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ProviderAPIError(f"ChatGPT API request failed: {e}") from e

        if not isinstance(result, dict):
            raise ProviderAPIError(f"Unexpected ChatGPT response: expected an object, got {type(result).__name__}")
        choices = result.get("choices") or []
        if not isinstance(choices, list):
            raise ProviderAPIError("Unexpected ChatGPT response: 'choices' is not a list")
        if not choices:
            return ""
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if not isinstance(message, dict):
            raise ProviderAPIError("Unexpected ChatGPT response: choice has no message")
        return str(message.get("content") or "").strip()
