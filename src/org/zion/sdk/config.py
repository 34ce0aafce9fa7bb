"""
Configuration for the Zion SDK

Two layers of configuration decide how resolvers and call builders talk to remote
servers:

1. Settings: process-wide defaults loaded from ZION_* environment variables with
   pydantic-settings. The SDK never reads them in the middle of a request; they are
   consulted once, when a resolver or call builder is created or a static entry point
   such as FederationServer.resolve runs.
2. ResolverOptions: explicit, per-call or per-instance overrides. Unset fields fall
   through to the next layer.

The merged result is a frozen ResolverPolicy that instances keep for their lifetime:

    policy = resolve_policy(call_options, instance_options, settings=settings)

Precedence is always explicit per-call option > instance option > process default.
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Process-wide defaults for the Zion SDK.

    Values are loaded from environment variables with the ZION_ prefix, so
    ZION_ALLOW_HTTP=true enables plain-http servers for every resolver that does not
    say otherwise. Tests and applications that want to avoid the environment can build
    a Settings instance directly and pass it to resolvers.
    """

    model_config = SettingsConfigDict(env_prefix="ZION_")

    allow_http: bool = False
    """
    Allow connecting to http (non-TLS) servers.
    This must be left false in production deployments.
    Set with ZION_ALLOW_HTTP environment variable.
    """

    timeout: float = Field(default=0, ge=0)
    """
    Request timeout in seconds, 0 disables the timeout.
    Set with ZION_TIMEOUT environment variable.
    """

    horizon_url: str = "https://horizon.zion.org"
    """
    Horizon server used by the command line tools when none is given.
    Set with ZION_HORIZON_URL environment variable.
    """

    sentry_dsn: Optional[str] = None
    """
    Sentry DSN for error reporting from the command line tools.
    Set with ZION_SENTRY_DSN environment variable.
    """


class ResolverOptions(BaseModel):
    """Explicit overrides for a single call or a single instance.

    A field left as None defers to the next configuration layer.
    """

    model_config = ConfigDict(frozen=True)

    allow_http: Optional[bool] = None
    timeout: Optional[float] = Field(default=None, ge=0)


class ResolverPolicy(BaseModel):
    """Effective connection policy after all layers have been merged."""

    model_config = ConfigDict(frozen=True)

    allow_http: bool
    timeout: float


_default_settings: Optional[Settings] = None


def default_settings() -> Settings:
    """Return the process default settings, loading them from the environment once."""
    global _default_settings
    if _default_settings is None:
        _default_settings = Settings()
    return _default_settings


def set_default_settings(settings: Settings) -> None:
    """Replace the process default settings."""
    global _default_settings
    logger.debug(
        "Default settings replaced: allow_http=%s timeout=%s",
        settings.allow_http,
        settings.timeout,
    )
    _default_settings = settings


def reset_default_settings() -> None:
    """Forget the process default settings so the next read reloads the environment."""
    global _default_settings
    _default_settings = None


def resolve_policy(
    *layers: Optional[ResolverOptions], settings: Optional[Settings] = None
) -> ResolverPolicy:
    """Merge option layers, most specific first, over the given or default settings."""
    if settings is None:
        settings = default_settings()

    allow_http: Optional[bool] = None
    timeout: Optional[float] = None
    for layer in layers:
        if layer is None:
            continue
        if allow_http is None:
            allow_http = layer.allow_http
        if timeout is None:
            timeout = layer.timeout

    return ResolverPolicy(
        allow_http=settings.allow_http if allow_http is None else allow_http,
        timeout=settings.timeout if timeout is None else timeout,
    )
