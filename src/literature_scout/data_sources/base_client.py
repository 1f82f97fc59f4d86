"""
Base client for NCBI E-utilities.

Provides: session management, shared rate limiting, retry with exponential
backoff for throttling responses, and structured logging. Every other
failure is surfaced immediately as a RetrievalError naming the endpoint.
"""

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import aiohttp
from pydantic import BaseModel

from literature_scout.config import Settings, get_settings
from literature_scout.constants import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    RETRYABLE_STATUS_CODES,
)
from literature_scout.exceptions import RetrievalError
from literature_scout.utils.rate_limiter import RateLimiter

logger = logging.getLogger("literature_scout.data_sources")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class RetryConfig(BaseModel):
    """Retry behaviour for throttled requests."""

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = 2.0  # seconds
    max_delay: float = 30.0  # seconds
    backoff_factor: float = 2.0
    retryable_status_codes: frozenset[int] = RETRYABLE_STATUS_CODES

    def delay_for(self, attempt: int) -> float:
        """Backoff before retry number ``attempt + 1``."""
        return min(self.base_delay * (self.backoff_factor**attempt), self.max_delay)


class ClientConfig(BaseModel):
    """Top-level config aggregating retry and transport settings."""

    retry: RetryConfig = RetryConfig()
    timeout_seconds: float = DEFAULT_TIMEOUT

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClientConfig":
        return cls(
            retry=RetryConfig(
                max_retries=settings.max_retries,
                base_delay=settings.retry_base_delay,
                max_delay=settings.retry_max_delay,
            ),
            timeout_seconds=settings.request_timeout_seconds,
        )


# ---------------------------------------------------------------------------
# Base client
# ---------------------------------------------------------------------------


class BaseClient(ABC):
    """
    Abstract base for E-utilities clients.

    The rate limiter is injected so that several clients can share one
    bucket. When none is given, one is built from settings for this client
    alone.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        rate_limiter: RateLimiter | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.config = config or ClientConfig.from_settings(self.settings)
        self.rate_limiter = rate_limiter or RateLimiter.from_settings(self.settings)
        self._session: aiohttp.ClientSession | None = None

    @property
    @abstractmethod
    def _source_name(self) -> str:
        """Identifier for this data source, e.g. 'eutils'."""
        ...

    # -- Session management --------------------------------------------------

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    # -- Core request with rate limiting + retry -----------------------------

    async def _request(
        self,
        endpoint: str,
        url: str,
        params: dict[str, Any],
        *,
        as_json: bool = True,
    ) -> Any:
        """
        GET ``url`` and return the decoded JSON body (or raw text).

        Parameters
        ----------
        endpoint : str
            Short endpoint name used in logs and errors, e.g. "esearch".
        url : str
            Full URL.
        params : dict
            Query string parameters.
        as_json : bool
            Decode the body as JSON when True, return text otherwise.

        A rate limiter slot is acquired before every attempt. Only the
        configured retryable statuses (429/503) are retried.
        """
        retry = self.config.retry
        start = time.monotonic()
        last_status: int | None = None

        for attempt in range(retry.max_retries + 1):
            await self.rate_limiter.wait_for_slot()
            session = await self._get_session()

            logger.info(
                "Request [%s.%s] attempt=%d url=%s",
                self._source_name,
                endpoint,
                attempt + 1,
                url,
            )

            try:
                resp = await session.get(url, params=params)

                if resp.status in retry.retryable_status_codes:
                    last_status = resp.status
                    # Return the connection to the pool before backing off
                    resp.release()
                    if attempt == retry.max_retries:
                        break
                    delay = retry.delay_for(attempt)
                    if resp.status == 429:
                        # Respect Retry-After header if present
                        retry_after = resp.headers.get("Retry-After")
                        if retry_after and retry_after.isdigit():
                            delay = float(retry_after)
                    logger.warning(
                        "Retryable %d from %s.%s, retry %d/%d in %.1fs",
                        resp.status,
                        self._source_name,
                        endpoint,
                        attempt + 1,
                        retry.max_retries,
                        delay,
                    )
                    await asyncio.sleep(delay)
                    continue

                if resp.status >= 400:
                    body = await resp.text()
                    raise RetrievalError(
                        endpoint,
                        f"HTTP {resp.status}: {body[:500]}",
                        status_code=resp.status,
                    )

                data = await resp.json(content_type=None) if as_json else await resp.text()

            except asyncio.TimeoutError as e:
                elapsed = time.monotonic() - start
                raise RetrievalError(endpoint, f"Timeout after {elapsed:.1f}s") from e
            except (json.JSONDecodeError, aiohttp.ContentTypeError) as e:
                raise RetrievalError(endpoint, f"Malformed JSON response: {e}") from e
            except aiohttp.ClientError as e:
                raise RetrievalError(endpoint, f"Connection error: {e}") from e

            logger.info(
                "Success [%s.%s] elapsed=%.2fs",
                self._source_name,
                endpoint,
                time.monotonic() - start,
            )
            return data

        elapsed = time.monotonic() - start
        logger.error(
            "All retries exhausted [%s.%s] after %.1fs (last status %s)",
            self._source_name,
            endpoint,
            elapsed,
            last_status,
        )
        raise RetrievalError(
            endpoint,
            f"HTTP {last_status}: retries exhausted after {retry.max_retries + 1} attempts",
            status_code=last_status,
        )

    # -- Convenience methods for subclasses ----------------------------------

    async def _rest_get(
        self, endpoint: str, url: str, params: dict[str, Any]
    ) -> dict[str, Any]:
        """GET a JSON endpoint; a non-object body is treated as malformed."""
        data = await self._request(endpoint, url, params)
        if not isinstance(data, dict):
            raise RetrievalError(
                endpoint, f"Malformed JSON response: expected object, got {type(data).__name__}"
            )
        return data

    async def _rest_get_xml(self, endpoint: str, url: str, params: dict[str, Any]) -> str:
        """GET an endpoint that returns XML (or other text)."""
        return await self._request(endpoint, url, params, as_json=False)
