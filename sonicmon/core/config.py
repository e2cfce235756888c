#!/usr/bin/env python3
"""
sonicmon Server Configuration Management

Lookup order for the YAML file:
1. Explicit path (``-c/--config`` on the command line)
2. Environment variable SONICMON_CONFIG (``.env`` is honoured)
3. ./config.yaml (if exists)
4. Defaults

Both backends default to the local development ports:
    registry:   http://localhost:8080
    prometheus: http://localhost:9090
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("sonicmon.server")

load_dotenv()

DEFAULT_CONFIG_FILES = ["./config.yaml"]


class ServerConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    # Backends
    registry_url: str = "http://localhost:8080"
    prometheus_url: str = "http://localhost:9090"
    request_timeout: float = Field(10.0, gt=0)
    # Polling and range queries
    poll_interval: int = Field(30, ge=1)
    window_seconds: int = Field(3600, ge=1)
    step_seconds: int = Field(30, ge=1)
    # Serve placeholder devices (flagged as such) when the registry is down
    registry_placeholder_fallback: bool = True
    # HTTPS
    use_tls: bool = False
    cert_path: Optional[str] = None
    key_path: Optional[str] = None


def load_config_from(path: str) -> ServerConfig:
    """Load server configuration from YAML file."""
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    return ServerConfig(**data)


def load_config(config_path: Optional[str] = None) -> ServerConfig:
    """
    Load configuration with simple fallbacks.

    An explicitly requested file must exist and parse; the implicit
    candidates are skipped with a warning when they are broken.
    """
    if config_path:
        logger.info(f"Loading configuration from: {config_path}")
        return load_config_from(config_path)

    candidates = [os.environ.get("SONICMON_CONFIG")] + DEFAULT_CONFIG_FILES
    for candidate in candidates:
        if not candidate:
            continue
        config_file = Path(candidate)
        if not config_file.exists():
            continue
        try:
            logger.info(f"Loading configuration from: {config_file}")
            return load_config_from(str(config_file))
        except Exception as e:
            logger.warning(f"Failed to load config from {config_file}: {e}")

    logger.info("Using default configuration")
    return ServerConfig()


def resolve_tls_paths(cfg: ServerConfig) -> Tuple[Optional[Path], Optional[Path]]:
    """Return (cert_path, key_path) when TLS is enabled and both files are configured."""
    if not cfg.use_tls:
        return None, None
    if not cfg.cert_path or not cfg.key_path:
        raise ValueError("use_tls requires both cert_path and key_path")
    return Path(cfg.cert_path), Path(cfg.key_path)


def public_settings(cfg: ServerConfig) -> Dict[str, Any]:
    """Settings that are safe to show on the dashboard footer."""
    return {
        "registry_url": cfg.registry_url,
        "prometheus_url": cfg.prometheus_url,
        "poll_interval": cfg.poll_interval,
        "window_seconds": cfg.window_seconds,
        "step_seconds": cfg.step_seconds,
    }
