from typing import List, Optional
import argparse
import aiohttp
import asyncio
import json
import logging

import sentry_sdk

from org.zion.sdk.cli import configure_logging, configure_sentry
from org.zion.sdk.config import ResolverOptions, Settings
from org.zion.sdk.resolve.descriptor import resolve_descriptor
from org.zion.sdk.resolve.federation import FederationServer

logger = logging.getLogger(__name__)


async def federation_server(
    session: aiohttp.ClientSession,
    server: Optional[str],
    domain: Optional[str],
    options: ResolverOptions,
    settings: Settings,
) -> FederationServer:
    if server is not None:
        return FederationServer(session, server, domain, options, settings)
    if domain is None:
        raise SystemExit("Either --server or --domain is required for this command.")
    return await FederationServer.create_for_domain(session, domain, options, settings)


async def realMain() -> int:
    parser = argparse.ArgumentParser(
        prog="zion-resolve", description="Resolve Zion addresses and zion.toml files"
    )
    parser.add_argument(
        "command",
        choices=["address", "account", "txid", "toml"],
        help="address: resolve name*domain or account ids, account: reverse lookup an "
        "account id, txid: look up a transaction sender, toml: print a domain's zion.toml",
    )
    parser.add_argument("values", nargs="+", help="The value(s) to resolve.")
    parser.add_argument(
        "--server", default=None, help="Federation server URL for account and txid lookups."
    )
    parser.add_argument(
        "--domain", default=None, help="Domain whose federation server should be used."
    )
    parser.add_argument(
        "--allow-http",
        action="store_true",
        default=None,
        help="Allow connecting to http servers. Never use this in production.",
    )
    parser.add_argument(
        "--timeout", type=float, default=None, help="Request timeout in seconds, 0 for none."
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")

    args = vars(parser.parse_args())

    configure_logging(args.get("verbose", False))
    settings = Settings()
    configure_sentry(settings)

    options = ResolverOptions(
        allow_http=args.get("allow_http"), timeout=args.get("timeout")
    )
    command: str = args.get("command", "address")
    values: List[str] = args.get("values", [])

    failures = 0
    async with aiohttp.ClientSession() as session:
        for value in values:
            try:
                if command == "toml":
                    descriptor = await resolve_descriptor(session, value, options, settings)
                    print(json.dumps(dict(descriptor), indent=2, default=str))
                    continue

                if command == "address":
                    record = await FederationServer.resolve(session, value, options, settings)
                else:
                    server = await federation_server(
                        session, args.get("server"), args.get("domain"), options, settings
                    )
                    if command == "account":
                        record = await server.resolve_account_id(value)
                    else:
                        record = await server.resolve_transaction_id(value)
                print(record.model_dump_json(exclude_none=True))
            except Exception as e:
                failures += 1
                sentry_sdk.capture_exception(e)
                logging.exception("Exception resolving %s %s", command, value)

    return 1 if failures > 0 else 0


def main() -> None:
    raise SystemExit(asyncio.run(realMain()))


if __name__ == "__main__":
    main()
