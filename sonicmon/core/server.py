#!/usr/bin/env python3
"""
sonicmon FastAPI application factory
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .. import __version__
from ..api.prometheus_client import PrometheusClient
from ..api.registry_client import RegistryClient
from ..api.routes.api_routes import create_api_routes
from ..api.routes.dashboard_routes import create_dashboard_routes
from ..dashboard import DashboardController
from .config import ServerConfig, public_settings

logger = logging.getLogger("sonicmon.server")


def create_controller(config: ServerConfig) -> DashboardController:
    """Build the dashboard controller and its backend clients from configuration."""
    registry = RegistryClient(
        config.registry_url,
        timeout=config.request_timeout,
        placeholder_fallback=config.registry_placeholder_fallback,
    )
    metrics = PrometheusClient(
        config.prometheus_url,
        timeout=config.request_timeout,
        window_seconds=config.window_seconds,
        step_seconds=config.step_seconds,
    )
    return DashboardController(
        registry,
        metrics,
        poll_interval=config.poll_interval,
        settings=public_settings(config),
    )


def create_app(config: ServerConfig, controller: Optional[DashboardController] = None) -> FastAPI:
    """
    Create the FastAPI app.

    The device list is loaded once on startup; panel pollers are torn down
    and both HTTP sessions closed on shutdown.
    """
    controller = controller or create_controller(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"registry: {config.registry_url}, prometheus: {config.prometheus_url}")
        await controller.load_devices()
        try:
            yield
        finally:
            await controller.shutdown()

    app = FastAPI(title="sonicmon", version=__version__, lifespan=lifespan)
    app.state.controller = controller
    app.state.config = config

    app.include_router(create_dashboard_routes(controller))
    app.include_router(create_api_routes(controller))
    return app
