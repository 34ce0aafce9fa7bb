"""Exceptions raised by the Zion SDK.

Every message starts with an error code (``error-zion-<area>-<nnnn>``). Errors carry
the values callers branch on as attributes.

Network and timeout failures are never wrapped: they surface as the aiohttp and
asyncio exceptions listed in ``TRANSPORT_ERRORS``.
"""

import asyncio
from typing import Optional, Sequence, Union

from aiohttp import ClientError

TRANSPORT_ERRORS = (ClientError, asyncio.TimeoutError)
"""Exception types a transport failure can surface as, for use in ``except`` clauses."""


class ZionSdkError(Exception):
    """Base class for all errors raised by this package."""


class InvalidAddressError(ZionSdkError):
    """The value is neither a federation address nor an account id."""

    def __init__(self, value: str, msg: Optional[str] = None) -> None:
        super().__init__(msg or f"error-zion-address-1000 Invalid Zion address: {value!r}")
        self.value = value


class InvalidAccountIdError(InvalidAddressError):
    """The value has no ``*`` separator and is not a valid account id."""

    def __init__(self, value: str) -> None:
        super().__init__(value, f"error-zion-address-1001 Invalid account id: {value!r}")


class UnknownDomainError(ZionSdkError):
    """A bare name was given to a federation server that has no bound domain."""

    def __init__(self, name: str) -> None:
        super().__init__(
            "error-zion-address-1002 Unknown domain. Make sure the address contains a "
            f"domain (ex. bob*zion.org) or bind a domain to the server: {name!r}"
        )
        self.name = name


class InsecureConnectionError(ZionSdkError):
    """Refusal to talk to a non-https endpoint without ``allow_http``."""

    def __init__(self, url: str) -> None:
        super().__init__(
            f"error-zion-config-1000 Cannot connect to insecure server: {url}"
        )
        self.url = url


class InvalidServerURLError(ZionSdkError):
    """A configured server or endpoint URL is not an absolute http(s) URL."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"error-zion-config-1001 Invalid server URL {url!r}: {reason}")
        self.url = url
        self.reason = reason


class DescriptorParseError(ZionSdkError):
    """The zion.toml file was fetched but could not be parsed."""

    def __init__(
        self, domain: str, detail: str, line: Optional[int] = None, column: Optional[int] = None
    ) -> None:
        if line is not None and column is not None:
            msg = f"error-zion-toml-1000 Parsing error on line {line}, column {column}: {detail}"
        else:
            msg = f"error-zion-toml-1000 Parsing error: {detail}"
        super().__init__(msg)
        self.domain = domain
        self.detail = detail
        self.line = line
        self.column = column


class DescriptorFieldMissingError(ZionSdkError):
    """The zion.toml file parsed but lacks a required field."""

    def __init__(self, domain: str, field: str) -> None:
        super().__init__(
            f"error-zion-toml-1001 zion.toml for {domain} does not contain {field} field"
        )
        self.domain = domain
        self.field = field


class ResponseSizeExceededError(ZionSdkError):
    """A response body exceeded the allowed number of bytes."""

    def __init__(self, max_size: int, msg: Optional[str] = None) -> None:
        super().__init__(
            msg or f"error-zion-http-1000 Response exceeds allowed size of {max_size}"
        )
        self.max_size = max_size


class DescriptorSizeExceededError(ResponseSizeExceededError):
    """The zion.toml file is larger than ZION_TOML_MAX_SIZE."""

    def __init__(self, max_size: int) -> None:
        super().__init__(
            max_size, f"error-zion-toml-1002 zion.toml file exceeds allowed size of {max_size}"
        )


class FederationResponseSizeExceededError(ResponseSizeExceededError):
    """A federation server response is larger than FEDERATION_RESPONSE_MAX_SIZE."""

    def __init__(self, max_size: int) -> None:
        super().__init__(
            max_size,
            f"error-zion-federation-1000 federation response exceeds allowed size of {max_size}",
        )


class BadResponseError(ZionSdkError):
    """The server answered with a non-2xx status.

    The raw body is kept so callers can inspect error documents themselves.
    """

    def __init__(self, status: int, reason: str, body: bytes, url: Optional[str] = None) -> None:
        super().__init__(
            f"error-zion-http-1001 Server query failed. Server responded: {status} {reason}"
        )
        self.status = status
        self.reason = reason
        self.body = body
        self.url = url

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class NotFoundError(BadResponseError):
    """The server answered 404."""


class RecordValidationError(ZionSdkError):
    """A federation response was not a usable federation record."""

    def __init__(self, msg: str) -> None:
        super().__init__(f"error-zion-federation-1001 {msg}")


class MemoTypeValidationError(RecordValidationError):
    """A federation record carries a memo field that is not a string."""

    def __init__(self, value_type: str) -> None:
        super().__init__(f"memo value should be of type string, got {value_type}")
        self.value_type = value_type


class TooManyFiltersError(ZionSdkError):
    """A strict call builder was given more than one filter."""

    def __init__(self, filters: Sequence[Sequence[Union[str, int]]]) -> None:
        super().__init__(
            f"error-zion-horizon-1000 Too many filters specified: {list(filters)!r}"
        )
        self.filters = [tuple(f) for f in filters]


class UnsupportedFilterError(ZionSdkError):
    """The resource does not support the requested filter or query parameter."""

    def __init__(self, resource: str, name: str) -> None:
        super().__init__(
            f"error-zion-horizon-1001 Resource {resource!r} does not support {name!r}"
        )
        self.resource = resource
        self.name = name
