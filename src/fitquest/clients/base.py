"""Base protocol and HTTP plumbing for upstream service clients."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol, runtime_checkable

import httpx

from ..errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

# Responses worth another attempt
RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})
BASE_DELAY_SECONDS = 0.5


@dataclass
class VideoSearchResult:
    """Best-match video returned by the search service."""

    video_id: str
    title: str | None = None


@runtime_checkable
class TextGenerator(Protocol):
    """Prompt in, text out."""

    async def generate(self, prompt: str) -> str:
        """Return the model's reply text for a prompt."""
        ...


@runtime_checkable
class VideoSearcher(Protocol):
    """Query in, single best match (or nothing) out."""

    @property
    def enabled(self) -> bool:
        """Whether the searcher is configured to make calls."""
        ...

    async def search(self, query: str) -> VideoSearchResult | None:
        """Return the best matching video for a query, or None."""
        ...


async def with_retries(
    send: Callable[[], Awaitable[httpx.Response]],
    *,
    service: str,
    max_retries: int,
    base_delay: float = BASE_DELAY_SECONDS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> httpx.Response:
    """Send a request, retrying transient failures with exponential backoff.

    Transport errors and 429/5xx responses are retried up to `max_retries`
    times, waiting `base_delay * 2**attempt` seconds in between. Any other
    non-2xx response fails immediately.

    Raises:
        UpstreamUnavailable: When the service keeps failing or answers with
            a non-retryable error status
    """
    attempt = 0
    while True:
        try:
            response = await send()
        except httpx.TransportError as e:
            if attempt >= max_retries:
                raise UpstreamUnavailable(
                    f"{service} is unreachable", {"service": service}
                ) from e
            logger.warning(
                "%s request failed (%s), retry %d/%d",
                service,
                type(e).__name__,
                attempt + 1,
                max_retries,
            )
        else:
            if response.status_code not in RETRY_STATUSES:
                if response.is_error:
                    raise UpstreamUnavailable(
                        f"{service} returned HTTP {response.status_code}",
                        {"service": service, "status": response.status_code},
                    )
                return response
            if attempt >= max_retries:
                raise UpstreamUnavailable(
                    f"{service} is overloaded or rate limited",
                    {"service": service, "status": response.status_code},
                )
            logger.warning(
                "%s returned HTTP %d, retry %d/%d",
                service,
                response.status_code,
                attempt + 1,
                max_retries,
            )

        await sleep(base_delay * 2**attempt)
        attempt += 1


class UpstreamClient:
    """Common configuration for the httpx-based upstream clients."""

    service_name = "upstream service"

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = BASE_DELAY_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        ) as client:
            return await with_retries(
                lambda: client.request(method, path, **kwargs),
                service=self.service_name,
                max_retries=self.max_retries,
                base_delay=self.retry_delay,
            )
