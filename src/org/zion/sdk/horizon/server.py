from typing import Optional, Union

from aiohttp import ClientSession
from yarl import URL

from org.zion.sdk.config import ResolverOptions, Settings, resolve_policy
from org.zion.sdk.horizon.call_builder import CallBuilder, check_scheme
from org.zion.sdk.horizon.filters import server_base


class Server:
    """Entry point for Horizon queries.

    Holds the server URL and connection policy and hands out one fresh CallBuilder
    per query.
    """

    def __init__(
        self,
        session: ClientSession,
        server_url: Union[str, URL],
        options: Optional[ResolverOptions] = None,
        settings: Optional[Settings] = None,
        strict: bool = False,
    ) -> None:
        self._server_url = server_base(server_url)
        self._policy = resolve_policy(options, settings=settings)
        check_scheme(self._server_url, self._policy)

        self._session = session
        self._strict = strict

    @property
    def server_url(self) -> URL:
        return self._server_url

    def _builder(self, resource: str) -> CallBuilder:
        options = ResolverOptions(
            allow_http=self._policy.allow_http, timeout=self._policy.timeout
        )
        return CallBuilder(
            self._session, self._server_url, resource, options, strict=self._strict
        )

    def accounts(self) -> CallBuilder:
        return self._builder("accounts")

    def effects(self) -> CallBuilder:
        return self._builder("effects")

    def ledgers(self) -> CallBuilder:
        return self._builder("ledgers")

    def payments(self) -> CallBuilder:
        return self._builder("payments")

    def transactions(self) -> CallBuilder:
        return self._builder("transactions")

    def operations(self) -> CallBuilder:
        return self._builder("operations")
