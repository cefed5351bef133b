"""
Resilient HTTP client that reaches the final rendered page of a landing URL.

Email links usually pass through click trackers and consent hops before the
landing page: HTTP redirects, cookie-gated hops and script or meta-refresh
redirects. The client follows these manually so cookies can be threaded
through every hop, and retries the whole chain on transient failures.
"""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional
from urllib.parse import urlparse

import aiohttp
import structlog

from landingqa.config.config import Config
from landingqa.crawler.redirects import CookieJar, resolve_redirect
from landingqa.exceptions import FetchError
from landingqa.extractor.page_extractor import PageExtractor
from landingqa.observability import increment, observe
from landingqa.protocols import FetchResult

logger = structlog.get_logger(__name__)

# Failures worth another attempt: timeouts, resets/aborts, refused connections
# and DNS failures (all ClientConnectionError), truncated payloads.
TRANSIENT_EXCEPTIONS = (asyncio.TimeoutError, aiohttp.ClientConnectionError, aiohttp.ClientPayloadError)

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.8",
}


@dataclass
class HopResponse:
    """One raw HTTP response inside a redirect chain."""

    url: str
    status: int
    headers: Mapping[str, str]
    set_cookies: List[str]
    body: bytes
    text: str


@dataclass
class CrawlerResponse:
    """Final response of a redirect chain with timing and attempt information."""

    status: int
    headers: Dict[str, str]
    body: bytes
    text: str
    url: str
    final_url: str
    start_ts: float
    end_ts: float
    attempts: int = 1
    redirect_chain: List[str] = field(default_factory=list)
    cookie_names: List[str] = field(default_factory=list)


def _decode(body: bytes, charset: Optional[str]) -> str:
    try:
        return body.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


class HttpClient:
    """Redirect-following HTTP client with cookie forwarding and retry."""

    def __init__(self, config: Config, extractor: Optional[PageExtractor] = None):
        self.config = config
        self.crawler_config = config.crawler
        self.extractor = extractor or PageExtractor(min_paragraph_length=config.matching.min_paragraph_length)
        self.session: Optional[aiohttp.ClientSession] = None
        self._is_initialized = False

    async def initialize(self) -> None:
        """Initialize the HTTP client session."""
        if self.session is None:
            timeout = aiohttp.ClientTimeout(total=self.crawler_config.timeout)
            # Cookies are forwarded explicitly per fetch, never by the session.
            self.session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": self.crawler_config.user_agent},
                cookie_jar=aiohttp.DummyCookieJar(),
            )
            self._is_initialized = True
            logger.debug("HTTP client session initialized")

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        if self.session:
            await self.session.close()
            self.session = None
        self._is_initialized = False

    async def __aenter__(self) -> "HttpClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _perform_request(self, url: str, cookie_header: Optional[str]) -> HopResponse:
        """Perform one GET without following redirects."""
        if not self._is_initialized or self.session is None:
            raise RuntimeError("HTTP client not initialized")

        headers = dict(DEFAULT_HEADERS)
        if cookie_header:
            headers["Cookie"] = cookie_header

        async with asyncio.timeout(self.crawler_config.timeout):
            async with self.session.get(url, headers=headers, allow_redirects=False) as response:
                body = await response.read()
                return HopResponse(
                    url=url,
                    status=response.status,
                    headers=response.headers,
                    set_cookies=list(response.headers.getall("Set-Cookie", [])),
                    body=body,
                    text=_decode(body, response.charset),
                )

    async def _follow_redirects(self, url: str) -> CrawlerResponse:
        """
        Run one attempt: request, follow redirects, forward cookies.

        At most ``max_redirects`` requests are made. When the cap is reached
        the last response obtained is used as the final one.
        """
        start_time = time.time()
        jar = CookieJar()
        chain: List[str] = []
        current = url
        max_hops = self.crawler_config.max_redirects

        for hop_index in range(max_hops):
            hop = await self._perform_request(current, jar.header())
            jar.update(hop.set_cookies)

            next_url = resolve_redirect(
                current,
                hop.status,
                hop.headers,
                hop.text,
                scan_success_bodies=self.crawler_config.scan_success_bodies,
            )
            if next_url is None:
                break
            if hop_index == max_hops - 1:
                logger.warning("Redirect limit reached, using last response", url=url, hops=max_hops)
                break

            logger.debug("Following redirect", status=hop.status, source=current, target=next_url)
            chain.append(current)
            current = next_url

        observe("redirect_hops", len(chain))
        return CrawlerResponse(
            status=hop.status,
            headers=dict(hop.headers),
            body=hop.body,
            text=hop.text,
            url=url,
            final_url=current,
            start_ts=start_time,
            end_ts=time.time(),
            redirect_chain=chain,
            cookie_names=jar.names(),
        )

    def _calculate_backoff_delay(self, attempt: int) -> float:
        """Exponential backoff with ±20% jitter; each delay exceeds the previous one."""
        base_delay = self.crawler_config.backoff_base_seconds * 2 ** (attempt - 1)
        jitter = random.uniform(0.8, 1.2)
        return base_delay * jitter

    async def _sleep(self, delay: float) -> None:
        await asyncio.sleep(delay)

    async def fetch(self, url: str) -> CrawlerResponse:
        """
        Fetch the final response for ``url``, retrying transient failures.

        The whole redirect chain is retried, up to ``max_attempts`` attempts,
        when an attempt times out, loses its connection, fails DNS
        resolution or ends on a 5xx status. Client errors (4xx) and invalid
        URLs fail immediately.

        Raises:
            FetchError: with the attempt count and the last cause.
        """
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise FetchError(url, attempts=0, cause=ValueError(f"Unsupported URL: {url!r}"))

        if not self._is_initialized:
            raise RuntimeError("HTTP client not initialized. Call initialize() first.")

        max_attempts = self.crawler_config.max_attempts
        start_time = time.time()
        last_error: Optional[BaseException] = None
        last_status: Optional[int] = None

        for attempt in range(1, max_attempts + 1):
            try:
                response = await self._follow_redirects(url)
            except TRANSIENT_EXCEPTIONS as e:
                last_error, last_status = e, None
                logger.warning(
                    "Transient fetch failure",
                    url=url,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error=str(e) or type(e).__name__,
                )
            except aiohttp.ClientError as e:
                increment("fetch_attempts_total", labels={"outcome": "failed"})
                logger.error("Fetch failed", url=url, attempt=attempt, error=str(e))
                raise FetchError(url, attempts=attempt, cause=e) from e
            except ValueError as e:
                # Unresolvable redirect target.
                increment("fetch_attempts_total", labels={"outcome": "failed"})
                logger.error("Invalid redirect target", url=url, attempt=attempt, error=str(e))
                raise FetchError(url, attempts=attempt, cause=e) from e
            else:
                if response.status >= 500:
                    last_error, last_status = None, response.status
                    logger.warning(
                        "Server error while fetching",
                        url=url,
                        final_url=response.final_url,
                        status=response.status,
                        attempt=attempt,
                    )
                elif response.status >= 400:
                    increment("fetch_attempts_total", labels={"outcome": "failed"})
                    logger.error("Client error while fetching", url=url, status=response.status)
                    raise FetchError(url, attempts=attempt, status=response.status)
                else:
                    increment("fetch_attempts_total", labels={"outcome": "success"})
                    observe("fetch_latency_seconds", time.time() - start_time)
                    response.attempts = attempt
                    logger.info(
                        "Fetched page",
                        url=url,
                        final_url=response.final_url,
                        status=response.status,
                        hops=len(response.redirect_chain),
                        attempts=attempt,
                    )
                    return response

            increment("fetch_attempts_total", labels={"outcome": "transient"})
            if attempt < max_attempts:
                delay = self._calculate_backoff_delay(attempt)
                logger.info("Retrying fetch", url=url, attempt=attempt, delay=round(delay, 3))
                await self._sleep(delay)

        raise FetchError(url, attempts=max_attempts, cause=last_error, status=last_status)

    async def fetch_page(self, url: str) -> FetchResult:
        """Fetch ``url`` and split the final HTML into text, paragraphs, links and images."""
        response = await self.fetch(url)
        page = await self.extractor.extract(response.text, url=response.final_url)
        page.status = response.status
        page.attempts = response.attempts
        page.redirect_chain = list(response.redirect_chain)
        return page
