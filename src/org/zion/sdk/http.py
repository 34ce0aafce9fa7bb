"""GET transport shared by the resolvers and the Horizon call builders.

Each request is a single GET with an optional cap on the number of body bytes read.
It does not interpret status codes; callers decide what a
non-2xx response means for them. Network failures and timeouts are raised as the
underlying aiohttp / asyncio exceptions.
"""

from dataclasses import dataclass
import json
import logging
from typing import Any, Optional

from aiohttp import ClientSession, ClientTimeout, hdrs
from aiohttp.typedefs import StrOrURL
from multidict import CIMultiDictProxy
import sentry_sdk
from yarl import URL

logger = logging.getLogger(__name__)

CHUNK_SIZE = 16 * 1024


class ResponseTooLarge(Exception):
    """The response body is larger than the byte limit of the request."""

    def __init__(self, url: str, limit: int) -> None:
        super().__init__(f"Response from {url} exceeds {limit} bytes")
        self.url = url
        self.limit = limit


@dataclass(frozen=True)
class HttpResponse:
    url: URL
    status: int
    reason: str
    headers: CIMultiDictProxy[str]
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def content_type(self) -> str:
        return self.headers.get(hdrs.CONTENT_TYPE, "")

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding)

    def json(self) -> Any:
        return json.loads(self.body)


def client_timeout(timeout: float) -> ClientTimeout:
    """Build an aiohttp timeout where 0 means no timeout at all."""
    if timeout > 0:
        return ClientTimeout(total=timeout)
    return ClientTimeout(total=None)


async def fetch(
    session: ClientSession,
    url: StrOrURL,
    *,
    max_size: Optional[int] = None,
    timeout: float = 0,
) -> HttpResponse:
    """Issue a GET request and read the whole body.

    Args:
        session: HTTP client session
        url: Absolute URL to fetch
        max_size: Maximum number of body bytes, None for no limit
        timeout: Total timeout in seconds, 0 for none

    Returns:
        The response with its body fully read

    Raises:
        ResponseTooLarge: The declared or received body exceeds max_size
    """
    sentry_sdk.add_breadcrumb(category="http", message=f"GET {url}", level="info")
    logger.debug("GET %s max_size=%s timeout=%s", url, max_size, timeout)

    async with session.get(url, timeout=client_timeout(timeout)) as resp:
        if max_size is not None:
            declared = resp.content_length
            if declared is not None and declared > max_size:
                raise ResponseTooLarge(str(url), max_size)

        body = bytearray()
        async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
            body.extend(chunk)
            if max_size is not None and len(body) > max_size:
                raise ResponseTooLarge(str(url), max_size)

        logger.debug("GET %s -> %s (%d bytes)", url, resp.status, len(body))
        return HttpResponse(
            url=URL(url),
            status=resp.status,
            reason=resp.reason or "",
            headers=resp.headers,
            body=bytes(body),
        )
