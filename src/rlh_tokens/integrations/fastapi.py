"""FastAPI wiring — binds a TokenConfig to an app and provides request-scoped TokenService dependencies.

Usage:
    app = FastAPI()
    add_token_service(app, settings_dict)          # reads the "TokenConfig" section

    @app.post("/confirm")
    def confirm(token: str, service: TokenService = Depends(get_token_service)):
        ...
"""

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from fastapi import FastAPI, Request

from rlh_tokens.config import TokenConfig
from rlh_tokens.settings import TokenSettings, config_from_callback, config_from_section
from rlh_tokens.token_service import TokenService

logger = logging.getLogger("rlh_tokens.integrations.fastapi")


def add_token_service(
    app: FastAPI,
    configuration: Mapping[str, Any] | None = None,
    *,
    section: str = "TokenConfig",
    config: TokenConfig | None = None,
    configure: Callable[[TokenSettings], None] | None = None,
) -> TokenConfig:
    """Register token configuration on the app for get_token_service.

    Exactly one source is used: an explicit ``config``, a ``configure``
    callback that fills in a TokenSettings, or the ``section`` of a
    ``configuration`` mapping.

    Returns:
        The bound TokenConfig.
    """
    sources = [s for s in (configuration, config, configure) if s is not None]
    if len(sources) != 1:
        raise ValueError("Pass exactly one of configuration, config or configure")

    if config is None:
        if configure is not None:
            config = config_from_callback(configure)
        else:
            config = config_from_section(configuration, section)

    app.state.token_config = config
    logger.debug("Token service registered on app")
    return config


def get_token_service(request: Request) -> Iterator[TokenService]:
    """FastAPI dependency: a request-scoped TokenService built from the app's registered config."""
    config = getattr(request.app.state, "token_config", None)
    if config is None:
        raise RuntimeError(
            "Token service not configured. Call add_token_service(app, ...) first."
        )
    with TokenService(config) as service:
        yield service


def create_token_service_dep(config: TokenConfig):
    """Create a FastAPI dependency yielding a request-scoped TokenService bound to config."""

    def token_service() -> Iterator[TokenService]:
        with TokenService(config) as service:
            yield service

    return token_service
