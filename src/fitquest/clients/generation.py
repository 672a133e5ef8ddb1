"""Text-generation client (Gemini `generateContent` REST API)."""

import logging

import httpx

from ..config import Settings, get_settings
from ..errors import GenerationParseError, UpstreamUnavailable
from .base import BASE_DELAY_SECONDS, UpstreamClient

logger = logging.getLogger(__name__)

SYSTEM_PREFIX = (
    "You are a professional fitness trainer. "
    "Generate a personalized workout program in JSON format only."
)


class GenerationClient(UpstreamClient):
    """Sends one prompt and returns the reply text."""

    service_name = "text generation service"

    def __init__(
        self,
        api_key: str | None,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        temperature: float = 0.3,
        max_output_tokens: int = 8192,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = BASE_DELAY_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(
            base_url,
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            retry_delay=retry_delay,
            transport=transport,
        )
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs) -> "GenerationClient":
        settings = settings or get_settings()
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.generation_base_url,
            timeout=settings.upstream_timeout_seconds,
            max_retries=settings.upstream_max_retries,
            **kwargs,
        )

    async def generate(self, prompt: str) -> str:
        """Generate a reply for `prompt`.

        Raises:
            UpstreamUnavailable: If no API key is configured or the service
                keeps failing
            GenerationParseError: If the reply carries no text
        """
        if not self.api_key:
            raise UpstreamUnavailable("Text generation service is not configured")

        body = {
            "contents": [{"parts": [{"text": f"{SYSTEM_PREFIX} {prompt}"}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_output_tokens,
            },
        }
        logger.debug("Requesting generation from %s", self.model)
        response = await self._request(
            "POST",
            f"/models/{self.model}:generateContent",
            params={"key": self.api_key},
            json=body,
        )

        try:
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GenerationParseError("Invalid response structure from generation service") from e
        if not isinstance(text, str):
            raise GenerationParseError("Invalid response structure from generation service")
        return text.strip()
