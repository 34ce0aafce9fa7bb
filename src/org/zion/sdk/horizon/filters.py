"""Request URL composition for Horizon resource queries.

A query targets one resource listing (``/payments``) unless a filter narrows it. A
filter is an ordered group of path segments, for example
``("accounts", "GABC...", "payments")``. When several filters were added, the last
one replaces the resource path entirely:

    compose_url(server, "payments", [("accounts", "X"), ("accounts", "X", "payments")])
    # -> {server}/accounts/X/payments

Query parameters are layered on after the path has been chosen and take no part in
that override.
"""

from typing import List, Mapping, Optional, Sequence, Tuple, Union

from yarl import URL

from org.zion.sdk.errors import InvalidServerURLError

Segment = Union[str, int]
Filter = Tuple[Segment, ...]
QueryValue = Union[str, int, bool, None]


def server_base(server_url: Union[str, URL]) -> URL:
    """Validate a Horizon server URL and normalise it to a base without query or fragment.

    Raises:
        InvalidServerURLError: The URL is not absolute http(s) or carries a query or fragment
    """
    url = URL(server_url)
    if not url.is_absolute() or url.scheme not in ("http", "https"):
        raise InvalidServerURLError(str(server_url), "expected an absolute http(s) URL")
    if url.query_string or url.fragment:
        raise InvalidServerURLError(
            str(server_url), "server URL must not have a query or fragment"
        )
    return url


def segment_text(segment: Segment) -> str:
    # bool is an int subclass, but True is never a meaningful path segment
    if isinstance(segment, bool) or not isinstance(segment, (str, int)):
        raise TypeError(f"path segment must be str or int, got {type(segment).__name__}")
    return str(segment)


def query_text(value: Union[str, int, bool]) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def resolve_path(resource: str, filters: Sequence[Sequence[Segment]]) -> List[str]:
    """Choose the path segments for a query: the last filter wins over the resource."""
    if len(filters) == 0:
        return [segment_text(resource)]
    return [segment_text(segment) for segment in filters[-1]]


def compose_url(
    server_url: Union[str, URL],
    resource: str,
    filters: Sequence[Sequence[Segment]] = (),
    query: Optional[Mapping[str, QueryValue]] = None,
) -> URL:
    """Build the request URL of a resource query.

    Args:
        server_url: Horizon server URL, possibly with a sub-path
        resource: Resource listing used when no filter was added (ex. payments)
        filters: Filter groups in the order they were added
        query: Query parameters, None values are dropped

    Returns:
        The absolute request URL
    """
    url = server_base(server_url)
    for segment in resolve_path(resource, filters):
        url = url / segment

    params: List[Tuple[str, str]] = [
        (key, query_text(value))
        for key, value in (query or {}).items()
        if value is not None
    ]
    if len(params) > 0:
        url = url.with_query(params)
    return url
