"""
Fetcher implementations for retrieving web pages.

Returns the raw response body so snapshots can be compared byte for byte.
"""

import asyncio
from abc import ABC, abstractmethod

import httpx
import structlog

from .models import FetchResult

logger = structlog.get_logger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; PageMonitor/1.0)"


class FetchError(Exception):
    """Raised when a resource cannot be retrieved."""

    pass


class Fetcher(ABC):
    """
    Abstract base class for fetchers.

    Implementations return a (result, error) pair instead of raising so the
    runner can decide whether a failure aborts the run.
    """

    @abstractmethod
    async def fetch(
        self, url: str, timeout: int = 30000
    ) -> tuple[FetchResult | None, str | None]:
        """
        Fetch a URL.

        Args:
            url: The URL to fetch
            timeout: Timeout in milliseconds

        Returns:
            Tuple of (FetchResult, None) on success, or (None, error_message) on failure
        """
        pass


class HTTPFetcher(Fetcher):
    """
    Fetches URLs over plain HTTP(S) using httpx.

    Follows redirects. Non-2xx responses are still returned as observations;
    only transport failures count as errors.
    """

    def __init__(
        self,
        user_agent: str | None = None,
        follow_redirects: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the HTTP fetcher.

        Args:
            user_agent: Custom User-Agent header (optional)
            follow_redirects: Whether to follow HTTP redirects
            transport: Optional httpx transport, used to stub the network in tests
        """
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.follow_redirects = follow_redirects
        self.transport = transport
        self.logger = logger.bind(component="fetcher")

    async def fetch(
        self, url: str, timeout: int = 30000
    ) -> tuple[FetchResult | None, str | None]:
        start_time = asyncio.get_running_loop().time()

        try:
            async with httpx.AsyncClient(
                follow_redirects=self.follow_redirects,
                timeout=timeout / 1000.0,
                headers={"User-Agent": self.user_agent},
                transport=self.transport,
            ) as client:
                response = await client.get(url)
                content = await response.aread()
        except httpx.TimeoutException:
            return None, f"Timeout after {timeout}ms"
        except httpx.HTTPError as e:
            return None, f"HTTP error: {str(e)}"
        except httpx.InvalidURL as e:
            return None, f"Invalid URL: {str(e)}"
        except Exception as e:
            return None, f"Unexpected error: {str(e)}"

        fetch_time_ms = int((asyncio.get_running_loop().time() - start_time) * 1000)

        result = FetchResult(
            url=url,
            status_code=response.status_code,
            content=content,
            fetch_time_ms=fetch_time_ms,
        )

        if not result.success:
            self.logger.warning(
                "Non-success status, using body as observation",
                url=url,
                status_code=response.status_code,
            )
        else:
            self.logger.debug(
                "Fetched", url=url, size=len(content), fetch_time_ms=fetch_time_ms
            )

        return result, None
