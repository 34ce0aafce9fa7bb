"""zion.toml descriptor resolution.

A domain advertises its Zion services (federation server, Horizon URL, signing keys,
...) in a TOML file served from ``https://{domain}/.well-known/zion.toml``.
"""

import logging
import re
import tomllib
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from aiohttp import ClientSession

from org.zion.sdk.config import ResolverOptions, Settings, resolve_policy
from org.zion.sdk.errors import (
    BadResponseError,
    DescriptorParseError,
    DescriptorSizeExceededError,
)
from org.zion.sdk.http import ResponseTooLarge, fetch

logger = logging.getLogger(__name__)

ZION_TOML_MAX_SIZE = 100 * 1024
"""Maximum size in bytes of a zion.toml file."""

ZION_TOML_PATH = "/.well-known/zion.toml"

FEDERATION_SERVER = "FEDERATION_SERVER"

_POSITION_PATTERN = re.compile(r"\(at line (\d+), column (\d+)\)")


class Descriptor(Mapping[str, Any]):
    """Read-only view of a parsed zion.toml file."""

    def __init__(self, domain: str, values: Dict[str, Any]) -> None:
        self._domain = domain
        self._values = dict(values)

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def federation_server(self) -> Optional[str]:
        value = self._values.get(FEDERATION_SERVER)
        if isinstance(value, str) and len(value) > 0:
            return value
        return None

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Descriptor(domain={self._domain!r}, keys={sorted(self._values)!r})"


def descriptor_url(domain: str, allow_http: bool) -> str:
    scheme = "http" if allow_http else "https"
    return f"{scheme}://{domain}{ZION_TOML_PATH}"


def error_position(e: ValueError) -> Tuple[Optional[int], Optional[int]]:
    """Extract the 1-based line and column of a TOML decode error, if known."""
    line = getattr(e, "lineno", None)
    column = getattr(e, "colno", None)
    if line is not None and column is not None:
        return line, column
    match = _POSITION_PATTERN.search(str(e))
    if match is None:
        return None, None
    return int(match.group(1)), int(match.group(2))


def parse_descriptor(domain: str, body: bytes) -> Descriptor:
    """Parse raw zion.toml bytes.

    Raises:
        DescriptorParseError: The body is not UTF-8 or not valid TOML
    """
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DescriptorParseError(domain, f"file is not valid UTF-8: {e}") from e

    try:
        values = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        line, column = error_position(e)
        detail = getattr(e, "msg", None) or _POSITION_PATTERN.sub("", str(e)).strip()
        raise DescriptorParseError(domain, detail, line, column) from e

    return Descriptor(domain, values)


async def resolve_descriptor(
    session: ClientSession,
    domain: str,
    options: Optional[ResolverOptions] = None,
    settings: Optional[Settings] = None,
) -> Descriptor:
    """Fetch and parse the zion.toml file of a domain.

    Every call fetches the file again; nothing is cached.

    Args:
        session: HTTP client session
        domain: Domain to get the zion.toml file for (ex. acme.com)
        options: Per-call allow_http / timeout overrides
        settings: Defaults to use instead of the process defaults

    Returns:
        The parsed descriptor

    Raises:
        DescriptorSizeExceededError: The file is larger than ZION_TOML_MAX_SIZE
        DescriptorParseError: The file is not valid TOML
        BadResponseError: The server answered with a non-2xx status
    """
    policy = resolve_policy(options, settings=settings)
    url = descriptor_url(domain, policy.allow_http)

    try:
        response = await fetch(
            session, url, max_size=ZION_TOML_MAX_SIZE, timeout=policy.timeout
        )
    except ResponseTooLarge as e:
        raise DescriptorSizeExceededError(ZION_TOML_MAX_SIZE) from e

    if not response.ok:
        raise BadResponseError(response.status, response.reason, response.body, url)

    descriptor = parse_descriptor(domain, response.body)
    logger.debug("Resolved zion.toml for %s with %d keys", domain, len(descriptor))
    return descriptor
