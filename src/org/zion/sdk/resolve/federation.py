"""Zion federation resolution.

Resolves federation addresses (``bob*acme.com``) to account ids by discovering the
domain's federation server through its zion.toml file and querying it. Account ids,
account-to-address and transaction lookups go through the same request path.
"""

from enum import Enum, IntEnum
import json
import logging
from typing import Any, Dict, Optional, Union

from aiohttp import ClientSession
from pydantic import BaseModel, ConfigDict, ValidationError
from yarl import URL

from org.zion.sdk.config import ResolverOptions, Settings, resolve_policy
from org.zion.sdk.errors import (
    BadResponseError,
    DescriptorFieldMissingError,
    FederationResponseSizeExceededError,
    InsecureConnectionError,
    InvalidAccountIdError,
    InvalidAddressError,
    InvalidServerURLError,
    MemoTypeValidationError,
    RecordValidationError,
    UnknownDomainError,
)
from org.zion.sdk.http import ResponseTooLarge, fetch
from org.zion.sdk.resolve.descriptor import FEDERATION_SERVER, resolve_descriptor
from org.zion.sdk.strkey import is_valid_account_id

logger = logging.getLogger(__name__)

FEDERATION_RESPONSE_MAX_SIZE = 100 * 1024
"""Maximum size in bytes of a federation server response."""

ADDRESS_SEPARATOR = "*"


class AddressType(IntEnum):
    """Kind of value handed to FederationServer.resolve."""

    account_id = 1
    federation_address = 2


class LookupType(str, Enum):
    """Value of the ``type`` query parameter of a federation request."""

    NAME = "name"
    ID = "id"
    TXID = "txid"


class MemoType(str, Enum):
    """Memo type a payment to the resolved account must carry."""

    id = "id"
    text = "text"
    hash = "hash"
    return_ = "return"


class ParsedAddress(BaseModel):
    """Classified resolve input.

    For federation addresses, domain holds the part after the separator.
    """

    address_type: AddressType
    value: str
    domain: Optional[str] = None


class FederationRecord(BaseModel):
    """Federation server answer for a lookup.

    Only the memo is checked; every other field, known or not, is kept as
    returned by the server. A memo_type outside MemoType stays a plain string.
    """

    model_config = ConfigDict(extra="allow")

    account_id: Optional[str] = None
    memo_type: Optional[Union[MemoType, str]] = None
    memo: Optional[str] = None


def parse_address(value: str) -> ParsedAddress:
    """Classify a resolve input as an account id or a federation address.

    Raises:
        InvalidAccountIdError: No separator and not a valid account id
        InvalidAddressError: More than one separator or an empty domain
    """
    if ADDRESS_SEPARATOR not in value:
        if not is_valid_account_id(value):
            raise InvalidAccountIdError(value)
        return ParsedAddress(address_type=AddressType.account_id, value=value)

    parts = value.split(ADDRESS_SEPARATOR)
    if len(parts) != 2 or len(parts[1]) == 0:
        raise InvalidAddressError(value)

    return ParsedAddress(
        address_type=AddressType.federation_address, value=value, domain=parts[1]
    )


def validate_record(body: bytes) -> FederationRecord:
    """Turn a federation response body into a FederationRecord.

    A memo field, when present, must be a string. Any other value, null included,
    raises MemoTypeValidationError before the model could coerce it.
    """
    try:
        data = json.loads(body)
    except ValueError as e:
        raise RecordValidationError(f"federation response is not JSON: {e}") from e

    if not isinstance(data, dict):
        raise RecordValidationError(
            f"federation response should be an object, got {type(data).__name__}"
        )

    if "memo" in data and not isinstance(data["memo"], str):
        raise MemoTypeValidationError(type(data["memo"]).__name__)

    try:
        return FederationRecord.model_validate(data)
    except ValidationError as e:
        raise RecordValidationError(f"invalid federation record: {e}") from e


class FederationServer:
    """Connection to a single federation server.

    The endpoint, domain and connection policy are fixed at construction and shared
    by every lookup; lookups keep no state of their own, so one instance can serve
    concurrent requests.

    Args:
        session: HTTP client session
        server_url: Federation endpoint (ex. https://acme.com/federation)
        domain: Domain the server answers for, used to complete bare names
        options: allow_http / timeout overrides for this instance
        settings: Defaults to use instead of the process defaults

    Raises:
        InvalidServerURLError: server_url is not an absolute URL
        InsecureConnectionError: server_url is not https and http is not allowed
    """

    def __init__(
        self,
        session: ClientSession,
        server_url: str,
        domain: Optional[str] = None,
        options: Optional[ResolverOptions] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        url = URL(server_url)
        if not url.is_absolute() or url.scheme not in ("http", "https"):
            raise InvalidServerURLError(server_url, "expected an absolute http(s) URL")

        self._policy = resolve_policy(options, settings=settings)
        if url.scheme != "https" and not self._policy.allow_http:
            raise InsecureConnectionError(server_url)

        self._session = session
        self._server_url = url
        self._domain = domain

    @property
    def server_url(self) -> URL:
        return self._server_url

    @property
    def domain(self) -> Optional[str]:
        return self._domain

    @property
    def timeout(self) -> float:
        return self._policy.timeout

    @staticmethod
    async def resolve(
        session: ClientSession,
        value: str,
        options: Optional[ResolverOptions] = None,
        settings: Optional[Settings] = None,
    ) -> FederationRecord:
        """Resolve a federation address or account id to a federation record.

        Account ids are validated locally and returned without any network request;
        this does not check that the account exists on the ledger. Federation
        addresses are resolved through the federation server named in the domain's
        zion.toml file.

        Args:
            session: HTTP client session
            value: Federation address (ex. bob*zion.org) or account id
            options: Per-call allow_http / timeout overrides
            settings: Defaults to use instead of the process defaults

        Returns:
            FederationRecord for the value
        """
        parsed = parse_address(value)
        if parsed.address_type == AddressType.account_id:
            return FederationRecord(account_id=parsed.value)

        if parsed.domain is None:
            raise InvalidAddressError(value)
        server = await FederationServer.create_for_domain(
            session, parsed.domain, options, settings
        )
        return await server.resolve_address(parsed.value)

    @staticmethod
    async def create_for_domain(
        session: ClientSession,
        domain: str,
        options: Optional[ResolverOptions] = None,
        settings: Optional[Settings] = None,
    ) -> "FederationServer":
        """Create a FederationServer from the FEDERATION_SERVER entry of a domain's zion.toml.

        Raises:
            DescriptorFieldMissingError: zion.toml has no FEDERATION_SERVER entry
        """
        descriptor = await resolve_descriptor(session, domain, options, settings)
        server_url = descriptor.federation_server
        if server_url is None:
            raise DescriptorFieldMissingError(domain, FEDERATION_SERVER)
        return FederationServer(session, server_url, domain, options, settings)

    async def resolve_address(self, address: str) -> FederationRecord:
        """Look up a federation address.

        A bare name (ex. bob) is completed with the domain bound to this server.

        Raises:
            UnknownDomainError: address has no domain and none is bound
        """
        if ADDRESS_SEPARATOR not in address:
            if not self._domain:
                raise UnknownDomainError(address)
            address = f"{address}{ADDRESS_SEPARATOR}{self._domain}"
        return await self._send_request(LookupType.NAME, address)

    async def resolve_account_id(self, account_id: str) -> FederationRecord:
        """Look up the federation record of an account id."""
        return await self._send_request(LookupType.ID, account_id)

    async def resolve_transaction_id(self, transaction_id: str) -> FederationRecord:
        """Look up the federation record of the sender of a transaction."""
        return await self._send_request(LookupType.TXID, transaction_id)

    def lookup_url(self, lookup_type: LookupType, query: str) -> URL:
        params: Dict[str, Any] = dict(self._server_url.query)
        params.update({"type": lookup_type.value, "q": query})
        return self._server_url.with_query(params)

    async def _send_request(self, lookup_type: LookupType, query: str) -> FederationRecord:
        url = self.lookup_url(lookup_type, query)

        try:
            response = await fetch(
                self._session,
                url,
                max_size=FEDERATION_RESPONSE_MAX_SIZE,
                timeout=self._policy.timeout,
            )
        except ResponseTooLarge as e:
            raise FederationResponseSizeExceededError(FEDERATION_RESPONSE_MAX_SIZE) from e

        if not response.ok:
            logger.info(
                "Federation lookup %s=%s failed with %s %s",
                lookup_type.value,
                query,
                response.status,
                response.reason,
            )
            raise BadResponseError(
                response.status, response.reason, response.body, str(url)
            )

        return validate_record(response.body)
