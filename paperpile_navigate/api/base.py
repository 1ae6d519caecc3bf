"""Base API client with request timeout and bounded 429 retry."""
import asyncio
from typing import Optional, Dict, Any, Callable, Awaitable, TypeVar
from abc import ABC, abstractmethod
import httpx
from paperpile_navigate.utils.errors import APIError, RateLimitError
from paperpile_navigate.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def parse_retry_after(value: Optional[str], default: float) -> float:
    """
    Parse a Retry-After header given in seconds.

    Args:
        value: Raw header value (may be None)
        default: Wait used when the header is absent or not numeric

    Returns:
        Seconds to wait
    """
    if value is None:
        return default
    try:
        seconds = float(value.strip())
    except ValueError:
        return default
    return seconds if seconds >= 0 else default


class BaseAPIClient(ABC):
    """Abstract base API client with retry logic."""

    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        max_retries: int = 3,
        default_retry_after: float = 2.0,
    ):
        """
        Initialize API client.

        Args:
            base_url: Base URL for API
            timeout: Request timeout in seconds
            max_retries: Retries allowed after a 429 response
            default_retry_after: Wait used when a 429 carries no Retry-After
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.default_retry_after = default_retry_after
        self.client = httpx.AsyncClient(timeout=timeout)

    async def _send(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """
        Send one HTTP request and map failures to APIError.

        Raises:
            RateLimitError: On HTTP 429, carrying the Retry-After wait
            APIError: On any other HTTP or transport failure
        """
        url = f"{self.base_url}/{endpoint}" if endpoint else self.base_url

        try:
            response = await self.client.request(
                method=method, url=url, params=params, headers=headers
            )

            if response.status_code == 429:
                retry_after = parse_retry_after(
                    response.headers.get("retry-after"), self.default_retry_after
                )
                raise RateLimitError("Rate limit exceeded", retry_after=retry_after)

            response.raise_for_status()
            return response

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error {e.response.status_code}: {e}")
            raise APIError(f"HTTP {e.response.status_code}: {str(e)}")
        except httpx.RequestError as e:
            logger.error(f"Request error: {e}")
            raise APIError(f"Request failed: {str(e)}")

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Make HTTP request and decode the JSON body.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint
            params: Query parameters
            headers: Request headers

        Returns:
            JSON response as dictionary

        Raises:
            RateLimitError: If rate limit exceeded
            APIError: If request fails
        """
        response = await self._send(method, endpoint, params=params, headers=headers)
        try:
            return response.json()
        except ValueError as e:
            raise APIError(f"Invalid JSON response: {e}")

    async def _make_text_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> str:
        """Make HTTP request and return the body as text (XML feeds)."""
        response = await self._send(method, endpoint, params=params, headers=headers)
        return response.text

    async def _retry_on_rate_limit(
        self,
        func: Callable[[], Awaitable[T]],
        max_retries: Optional[int] = None,
    ) -> T:
        """
        Call func, retrying only on RateLimitError.

        Each retry sleeps for the Retry-After wait reported by the failed
        attempt. Other errors propagate immediately.

        Args:
            func: Async function to call
            max_retries: Retry ceiling (defaults to self.max_retries)

        Returns:
            Result of the first successful call

        Raises:
            RateLimitError: When the ceiling is reached while still limited
            APIError: From a non-429 failure
        """
        retries = self.max_retries if max_retries is None else max_retries
        attempt = 0

        while True:
            try:
                return await func()
            except RateLimitError as e:
                if attempt >= retries:
                    logger.warning(f"Rate limited, giving up after {retries} retries")
                    raise
                wait_time = e.retry_after if e.retry_after is not None else self.default_retry_after
                attempt += 1
                logger.warning(
                    f"Rate limited. Waiting {wait_time}s before retry "
                    f"(attempt {attempt}/{retries})"
                )
                await asyncio.sleep(wait_time)

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()

    @abstractmethod
    async def get_paper(self, paper_id: str) -> Optional[Dict[str, Any]]:
        """Get paper metadata. Must be implemented by subclass."""
        pass
