"""HTTP JSON fetcher with bounded retries and escalating timeouts."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

logger = logging.getLogger("chronoshift.fetch")


class FetchError(RuntimeError):
    """Raised when a remote resource could not be fetched."""

    def __init__(self, message: str, *, url: str) -> None:
        super().__init__(message)
        self.url = url


class APIError(FetchError):
    """The remote answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str, *, url: str) -> None:
        super().__init__(f"API Error: {status_code} {reason} for URL: {url}", url=url)
        self.status_code = status_code


class FetchTimeoutError(FetchError):
    """A single attempt exceeded its timeout bound."""

    def __init__(self, timeout: float, *, url: str) -> None:
        super().__init__(f"Request to {url} timed out after {timeout:g}s", url=url)
        self.timeout = timeout


class ResilientFetcher:
    """Fetch JSON documents, retrying transient failures.

    Attempt ``n`` (0-based) may run for ``initial_timeout * 2**n`` seconds and
    is cancelled when it overruns. Between attempts the fetcher sleeps
    ``backoff_base * attempt_number`` seconds. A timeout on an attempt whose
    bound was already doubled is raised straight away.
    """

    def __init__(
        self,
        *,
        retries: int = 2,
        initial_timeout: float = 10.0,
        backoff_base: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.retries = retries
        self.initial_timeout = initial_timeout
        self.backoff_base = backoff_base
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=None,
            follow_redirects=True,
            headers={"User-Agent": "ChronoShift/1.0", "Accept": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def get_json(self, url: str) -> Any:
        attempt = 0
        while True:
            timeout = self.initial_timeout * (2 ** attempt)
            try:
                return await asyncio.wait_for(self._get_once(url), timeout=timeout)
            except asyncio.TimeoutError as exc:
                error: FetchError = FetchTimeoutError(timeout, url=url)
                logger.warning("Fetch attempt %d for %s timed out after %gs", attempt + 1, url, timeout)
                if attempt >= self.retries or attempt > 0:
                    logger.error("All fetch attempts failed for %s. Last error: %s", url, error)
                    raise error from exc
            except APIError as exc:
                logger.warning("Fetch attempt %d for %s got HTTP %s", attempt + 1, url, exc.status_code)
                if attempt >= self.retries:
                    logger.error("All fetch attempts failed for %s. Last error: %s", url, exc)
                    raise
            except FetchError as exc:
                logger.warning("Fetch attempt %d for %s failed: %s", attempt + 1, url, exc)
                if attempt >= self.retries:
                    logger.error("All fetch attempts failed for %s. Last error: %s", url, exc)
                    raise
            attempt += 1
            await asyncio.sleep(self.backoff_base * attempt)

    async def _get_once(self, url: str) -> Any:
        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as exc:
            raise asyncio.TimeoutError() from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Network error for URL: {url}: {exc}", url=url) from exc
        if not response.is_success:
            raise APIError(response.status_code, response.reason_phrase, url=url)
        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(f"Malformed JSON body from URL: {url}", url=url) from exc
