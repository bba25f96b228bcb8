"""
Base client for external data source clients.

Provides: session management, single-shot document fetching with status
validation, structured request logging, and the error taxonomy shared by
every stage of the retrieval pipeline.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aiohttp
from pydantic import BaseModel

from pubmed_retrieve.config import Settings, get_settings
from pubmed_retrieve.constants import (
    DEFAULT_TIMEOUT,
    ERROR_BODY_EXCERPT,
    PUBMED_FETCH_URL,
    PUBMED_SEARCH_URL,
)

logger = logging.getLogger("pubmed_retrieve.data_sources")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ClientConfig(BaseModel):
    """Endpoints and transport settings injected into a client."""

    search_url: str = PUBMED_SEARCH_URL
    fetch_url: str = PUBMED_FETCH_URL
    timeout_seconds: float = DEFAULT_TIMEOUT

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ClientConfig":
        settings = settings or get_settings()
        return cls(
            search_url=settings.pubmed_search_url,
            fetch_url=settings.pubmed_fetch_url,
            timeout_seconds=settings.request_timeout_seconds,
        )


# ---------------------------------------------------------------------------
# Request context (for structured logging)
# ---------------------------------------------------------------------------


class RequestContext(BaseModel):
    """Metadata attached to every outgoing request for logging."""

    source: str  # e.g. "pubmed"
    method: str  # e.g. "search", "fetch_articles"
    params: dict[str, Any] = {}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class DataSourceError(Exception):
    """Base exception for data source failures."""

    def __init__(
        self,
        source: str,
        message: str,
        status_code: int | None = None,
        stage: str | None = None,
    ):
        self.source = source
        self.status_code = status_code
        self.stage = stage
        self.message = message
        super().__init__(f"[{source}] {message}")


class InvalidEndpoint(DataSourceError):
    """Raised when a base URL is not a usable http(s) URL."""

    pass


class TransportError(DataSourceError):
    """Raised on connection, DNS, or timeout failures."""

    pass


class UnexpectedStatus(DataSourceError):
    """Raised when the upstream answers with anything other than HTTP 200."""

    def __init__(self, source: str, status_code: int, body: str = ""):
        self.body = body
        message = f"HTTP {status_code}"
        if body:
            message = f"{message}: {body}"
        super().__init__(source, message, status_code=status_code)


class DecodeError(DataSourceError):
    """
    Raised when a response does not have the expected document shape.

    When a client re-raises a decoder failure tagged with its stage, the
    untagged error is kept as ``original``.
    """

    def __init__(
        self,
        source: str,
        message: str,
        status_code: int | None = None,
        stage: str | None = None,
        original: "DecodeError | None" = None,
    ):
        self.original = original
        super().__init__(source, message, status_code=status_code, stage=stage)


class EncodeError(DataSourceError):
    """Raised when a record set cannot be serialized."""

    pass


class StageError(DataSourceError):
    """
    Wraps a lower-level failure with the pipeline stage it happened in.

    The wrapped error stays reachable as ``original`` (and ``__cause__``),
    and its status code is copied so callers can inspect it directly.
    """

    def __init__(self, source: str, stage: str, original: DataSourceError):
        self.original = original
        super().__init__(
            source,
            f"{stage} failed: {original.message}",
            status_code=original.status_code,
            stage=stage,
        )


class QueryBuildError(StageError):
    """Request URL for a stage could not be built."""

    pass


class FetchError(StageError):
    """Document for a stage could not be fetched."""

    pass


# ---------------------------------------------------------------------------
# Base client
# ---------------------------------------------------------------------------


class BaseClient(ABC):
    """
    Abstract base for upstream clients.

    Subclasses implement `_source_name` and their own typed methods that
    call `fetch_document()` or `fetch_bytes()`.
    """

    def __init__(self, config: ClientConfig | None = None):
        self.config = config or ClientConfig()
        self._session: aiohttp.ClientSession | None = None

    @property
    @abstractmethod
    def _source_name(self) -> str:
        """Identifier for this data source, e.g. 'pubmed'."""
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

    # -- Document fetching ---------------------------------------------------

    @asynccontextmanager
    async def fetch_document(
        self, url: str, *, context: RequestContext | None = None
    ) -> AsyncIterator[aiohttp.ClientResponse]:
        """
        GET `url` and yield the open response once its status is 200.

        The response is released when the block exits, whether the caller
        finished reading, raised while decoding, or was cancelled.

        Raises
        ------
        TransportError
            Connection, DNS, or timeout failure.
        UnexpectedStatus
            Any status other than 200; carries the status code.
        """
        ctx = context or RequestContext(source=self._source_name, method="unknown")
        session = await self._get_session()
        start = time.monotonic()

        logger.info(
            "Request [%s.%s] url=%s params=%s", ctx.source, ctx.method, url, ctx.params
        )

        try:
            resp = await session.get(url)
        except asyncio.TimeoutError as e:
            elapsed = time.monotonic() - start
            logger.warning(
                "Timeout [%s.%s] elapsed=%.1fs", ctx.source, ctx.method, elapsed
            )
            raise TransportError(ctx.source, f"Timeout after {elapsed:.1f}s") from e
        except aiohttp.ClientError as e:
            logger.warning("Connection error [%s.%s]: %s", ctx.source, ctx.method, e)
            raise TransportError(ctx.source, f"Connection error: {e}") from e

        try:
            if resp.status != 200:
                body = await self._read_excerpt(resp)
                logger.warning(
                    "Unexpected status %d from %s.%s: %s",
                    resp.status,
                    ctx.source,
                    ctx.method,
                    body[:200],
                )
                raise UnexpectedStatus(ctx.source, resp.status, body)

            yield resp

            logger.info(
                "Success [%s.%s] elapsed=%.2fs",
                ctx.source,
                ctx.method,
                time.monotonic() - start,
            )
        finally:
            resp.release()

    async def fetch_bytes(
        self, url: str, *, context: RequestContext | None = None
    ) -> bytes:
        """Convenience wrapper returning the full body of a 200 response."""
        async with self.fetch_document(url, context=context) as resp:
            try:
                return await resp.read()
            except asyncio.TimeoutError as e:
                raise TransportError(
                    self._source_name, "Timeout while reading body"
                ) from e
            except aiohttp.ClientError as e:
                raise TransportError(
                    self._source_name, f"Connection error while reading body: {e}"
                ) from e

    @staticmethod
    async def _read_excerpt(resp: aiohttp.ClientResponse) -> str:
        """Best-effort body excerpt for error messages."""
        try:
            text = await resp.text(errors="replace")
        except (aiohttp.ClientError, asyncio.TimeoutError):
            return ""
        return text[:ERROR_BODY_EXCERPT]
