import os
import logging
from logging.config import dictConfig
import json
from typing import Optional

import sentry_sdk

from org.zion.sdk.config import Settings


def configure_logging(verbose: bool = False) -> None:
    logging_config_file = os.getenv("LOGGING_CONFIG_FILE", "")

    if len(logging_config_file) > 0:
        with open(logging_config_file) as fl:
            dictConfig(json.load(fl))
        return

    logging.basicConfig()
    logging.getLogger().setLevel(logging.DEBUG if verbose else logging.INFO)


def configure_sentry(settings: Settings) -> bool:
    """Initialise error reporting when a DSN is configured."""
    dsn: Optional[str] = settings.sentry_dsn
    if dsn is None or len(dsn) == 0:
        return False
    sentry_sdk.init(dsn=dsn, send_default_pii=False)
    return True
