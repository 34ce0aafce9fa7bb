import argparse
import asyncio
import json
import logging
from typing import Any, Dict

import aiohttp
import sentry_sdk

from org.zion.sdk.cli import configure_logging, configure_sentry
from org.zion.sdk.config import ResolverOptions, Settings
from org.zion.sdk.horizon.call_builder import RESOURCES, CallBuilder, Page

logger = logging.getLogger(__name__)

FILTER_ARGUMENTS = ("record", "for_account", "for_ledger", "for_transaction", "for_operation")


def apply_arguments(builder: CallBuilder, args: Dict[str, Any]) -> CallBuilder:
    for name in FILTER_ARGUMENTS:
        value = args.get(name)
        if value is not None:
            getattr(builder, name)(value)

    if args.get("cursor") is not None:
        builder.cursor(args["cursor"])
    if args.get("limit") is not None:
        builder.limit(args["limit"])
    if args.get("order") is not None:
        builder.order(args["order"])
    if args.get("include_failed"):
        builder.include_failed(True)
    return builder


async def realMain() -> int:
    parser = argparse.ArgumentParser(prog="zion-horizon", description="Query Horizon")
    parser.add_argument("resource", choices=sorted(RESOURCES), help="Resource to query.")
    parser.add_argument(
        "--server", default=None, help="Horizon server URL, defaults to ZION_HORIZON_URL."
    )
    parser.add_argument("--record", default=None, help="Select a single record by id.")
    parser.add_argument("--for-account", default=None, help="Records of an account.")
    parser.add_argument("--for-ledger", default=None, help="Records of a ledger sequence.")
    parser.add_argument("--for-transaction", default=None, help="Records of a transaction.")
    parser.add_argument("--for-operation", default=None, help="Records of an operation.")
    parser.add_argument("--cursor", default=None, help="Paging token to start after.")
    parser.add_argument("--limit", type=int, default=None, help="Records per page.")
    parser.add_argument("--order", choices=["asc", "desc"], default=None)
    parser.add_argument(
        "--include-failed", action="store_true", help="Include failed transactions."
    )
    parser.add_argument(
        "--allow-http", action="store_true", default=None, help="Allow http servers."
    )
    parser.add_argument("--timeout", type=float, default=None, help="Timeout in seconds.")
    parser.add_argument(
        "--url-only", action="store_true", help="Print the request URL without fetching it."
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")

    args = vars(parser.parse_args())

    configure_logging(args.get("verbose", False))
    settings = Settings()
    configure_sentry(settings)

    options = ResolverOptions(allow_http=args.get("allow_http"), timeout=args.get("timeout"))
    server_url = args.get("server") or settings.horizon_url

    async with aiohttp.ClientSession() as session:
        try:
            builder = apply_arguments(
                CallBuilder(session, server_url, args["resource"], options, settings), args
            )
            if args.get("url_only"):
                print(builder.url())
                return 0

            result = await builder.call()
            if isinstance(result, Page):
                print(json.dumps(result.records, indent=2))
            else:
                print(json.dumps(result, indent=2))
        except Exception as e:
            sentry_sdk.capture_exception(e)
            logging.exception("Exception querying %s", args["resource"])
            return 1
    return 0


def main() -> None:
    raise SystemExit(asyncio.run(realMain()))


if __name__ == "__main__":
    main()
