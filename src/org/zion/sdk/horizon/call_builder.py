"""Fluent query builders for Horizon resources.

A single CallBuilder serves every resource. Which filters a resource accepts is
declared in RESOURCES rather than in a subclass per resource:

    builder = CallBuilder(session, "https://horizon.zion.org", "payments")
    page = await builder.for_account("GABC...").order("desc").limit(20).call()
    older = await page.next()

Each filter method appends one filter group; the last group decides the request path
(see org.zion.sdk.horizon.filters). Adding a second filter is almost always a caller
mistake, so it is logged, and a builder created with strict=True refuses it.
"""

from dataclasses import dataclass
import logging
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

from aiohttp import ClientSession
from yarl import URL

from org.zion.sdk.config import ResolverOptions, ResolverPolicy, Settings, resolve_policy
from org.zion.sdk.errors import (
    BadResponseError,
    InsecureConnectionError,
    NotFoundError,
    TooManyFiltersError,
    UnsupportedFilterError,
)
from org.zion.sdk.horizon.filters import (
    Filter,
    QueryValue,
    Segment,
    compose_url,
    server_base,
)
from org.zion.sdk.http import fetch

logger = logging.getLogger(__name__)

ORDER_DIRECTIONS = ("asc", "desc")

FILTER_PARENTS: Dict[str, str] = {
    "for_account": "accounts",
    "for_ledger": "ledgers",
    "for_transaction": "transactions",
    "for_operation": "operations",
}
"""Parent resource of each ``for_*`` filter: for_account on payments is /accounts/{id}/payments."""


@dataclass(frozen=True)
class ResourceSpec:
    name: str
    filters: FrozenSet[str]
    include_failed: bool = False


RESOURCES: Dict[str, ResourceSpec] = {
    spec.name: spec
    for spec in (
        ResourceSpec("accounts", frozenset({"record"})),
        ResourceSpec(
            "effects",
            frozenset({"for_account", "for_ledger", "for_transaction", "for_operation"}),
        ),
        ResourceSpec("ledgers", frozenset({"record"})),
        ResourceSpec(
            "payments",
            frozenset({"for_account", "for_ledger", "for_transaction"}),
            include_failed=True,
        ),
        ResourceSpec(
            "transactions",
            frozenset({"record", "for_account", "for_ledger"}),
            include_failed=True,
        ),
        ResourceSpec(
            "operations",
            frozenset({"record", "for_account", "for_ledger", "for_transaction"}),
            include_failed=True,
        ),
    )
}


def filter_segments(name: str, resource: str, value: Segment) -> Filter:
    """Path segments of a named filter on a resource."""
    if name == "record":
        return (resource, value)
    return (FILTER_PARENTS[name], value, resource)


def check_scheme(url: URL, policy: ResolverPolicy) -> None:
    if url.scheme != "https" and not policy.allow_http:
        raise InsecureConnectionError(str(url))


async def get_json(session: ClientSession, url: URL, timeout: float) -> Any:
    """GET a Horizon URL and decode its JSON body.

    Raises:
        NotFoundError: Horizon answered 404
        BadResponseError: Horizon answered with any other non-2xx status
    """
    response = await fetch(session, url, timeout=timeout)
    if response.status == 404:
        raise NotFoundError(response.status, response.reason, response.body, str(url))
    if not response.ok:
        raise BadResponseError(response.status, response.reason, response.body, str(url))
    return response.json()


class Page:
    """One page of a Horizon collection.

    next() and prev() follow the links Horizon returned with the page and return
    None when the link is absent.
    """

    def __init__(
        self, session: ClientSession, timeout: float, body: Dict[str, Any]
    ) -> None:
        self._session = session
        self._timeout = timeout
        self.records: List[Dict[str, Any]] = body["_embedded"]["records"]
        self.links: Dict[str, Any] = body.get("_links") or {}

    @staticmethod
    def is_collection(body: Any) -> bool:
        return (
            isinstance(body, dict)
            and isinstance(body.get("_embedded"), dict)
            and isinstance(body["_embedded"].get("records"), list)
        )

    async def next(self) -> Optional["Page"]:
        return await self._follow("next")

    async def prev(self) -> Optional["Page"]:
        return await self._follow("prev")

    async def _follow(self, rel: str) -> Optional["Page"]:
        href = (self.links.get(rel) or {}).get("href")
        if not href:
            return None
        body = await get_json(self._session, URL(href), self._timeout)
        return Page(self._session, self._timeout, body)

    def __len__(self) -> int:
        return len(self.records)

    def __repr__(self) -> str:
        return f"Page(records={len(self.records)}, links={sorted(self.links)!r})"


class CallBuilder:
    """Accumulates filters and query parameters for one Horizon resource.

    Args:
        session: HTTP client session
        server_url: Horizon server URL, possibly with a sub-path
        resource: Name of a resource in RESOURCES
        options: allow_http / timeout overrides for this builder
        settings: Defaults to use instead of the process defaults
        strict: Raise TooManyFiltersError instead of letting the last filter win
    """

    def __init__(
        self,
        session: ClientSession,
        server_url: Union[str, URL],
        resource: str,
        options: Optional[ResolverOptions] = None,
        settings: Optional[Settings] = None,
        strict: bool = False,
    ) -> None:
        if resource not in RESOURCES:
            raise ValueError(f"Unknown Horizon resource: {resource!r}")

        self._server_url = server_base(server_url)
        self._policy = resolve_policy(options, settings=settings)
        check_scheme(self._server_url, self._policy)

        self._session = session
        self._spec = RESOURCES[resource]
        self._strict = strict
        self._filters: List[Filter] = []
        self._query: Dict[str, QueryValue] = {}

    @property
    def resource(self) -> str:
        return self._spec.name

    @property
    def filters(self) -> Tuple[Filter, ...]:
        return tuple(self._filters)

    def record(self, record_id: Segment) -> "CallBuilder":
        """Select a single record (ex. one account or one ledger by sequence)."""
        return self._add_filter("record", record_id)

    def for_account(self, account_id: str) -> "CallBuilder":
        return self._add_filter("for_account", account_id)

    def for_ledger(self, sequence: Union[int, str]) -> "CallBuilder":
        return self._add_filter("for_ledger", sequence)

    def for_transaction(self, transaction_id: str) -> "CallBuilder":
        return self._add_filter("for_transaction", transaction_id)

    def for_operation(self, operation_id: Union[int, str]) -> "CallBuilder":
        return self._add_filter("for_operation", operation_id)

    def cursor(self, cursor: str) -> "CallBuilder":
        """Start the page after the record with this paging token ("now" for the latest)."""
        self._query["cursor"] = cursor
        return self

    def limit(self, number: int) -> "CallBuilder":
        if isinstance(number, bool) or not isinstance(number, int) or number <= 0:
            raise ValueError(f"limit must be a positive integer, got {number!r}")
        self._query["limit"] = number
        return self

    def order(self, direction: str) -> "CallBuilder":
        if direction not in ORDER_DIRECTIONS:
            raise ValueError(f"order must be one of {ORDER_DIRECTIONS}, got {direction!r}")
        self._query["order"] = direction
        return self

    def include_failed(self, value: bool) -> "CallBuilder":
        if not self._spec.include_failed:
            raise UnsupportedFilterError(self._spec.name, "include_failed")
        self._query["include_failed"] = bool(value)
        return self

    def url(self) -> URL:
        return compose_url(self._server_url, self._spec.name, self._filters, self._query)

    async def call(self) -> Union[Page, Dict[str, Any]]:
        """Fetch the composed URL.

        Returns:
            A Page for collection responses, otherwise the decoded JSON object
        """
        body = await get_json(self._session, self.url(), self._policy.timeout)
        if Page.is_collection(body):
            return Page(self._session, self._policy.timeout, body)
        return body

    def _add_filter(self, name: str, value: Segment) -> "CallBuilder":
        if name not in self._spec.filters:
            raise UnsupportedFilterError(self._spec.name, name)

        segments = filter_segments(name, self._spec.name, value)
        if len(self._filters) > 0:
            if self._strict:
                raise TooManyFiltersError(self._filters + [segments])
            logger.warning(
                "Replacing filter %s with %s on %s, only the last filter is used",
                "/".join(str(s) for s in self._filters[-1]),
                "/".join(str(s) for s in segments),
                self._spec.name,
            )
        self._filters.append(segments)
        return self
