#!/usr/bin/env python3
"""
sonicmon server - SONiC device telemetry dashboard

Entry point: loads configuration, builds the FastAPI app and runs it under uvicorn.
"""

import argparse
import logging

import uvicorn

# Support running as script or as package
try:
    from .core.config import load_config, resolve_tls_paths
    from .core.server import create_app
except ImportError:
    from sonicmon.core.config import load_config, resolve_tls_paths
    from sonicmon.core.server import create_app


def main():
    """Main entry point for sonicmon server."""
    parser = argparse.ArgumentParser(description="sonicmon server")
    parser.add_argument("-c", "--config", help="Path to YAML config", default=None)
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="logging level (overrides config)")
    args = parser.parse_args()

    # Load configuration
    config = load_config(args.config)
    if args.log_level:
        config.log_level = args.log_level

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("sonicmon.server").info(
        f"sonicmon starting on {config.host}:{config.port}, polling every {config.poll_interval}s"
    )

    cert_path, key_path = resolve_tls_paths(config)
    app = create_app(config)

    uvicorn_kwargs = {
        "host": config.host,
        "port": config.port,
        "reload": False,
        "access_log": False,
    }

    # Add SSL parameters if TLS is enabled
    if cert_path and key_path:
        uvicorn_kwargs.update({
            "ssl_keyfile": str(key_path),
            "ssl_certfile": str(cert_path),
        })

    uvicorn.run(app, **uvicorn_kwargs)


if __name__ == "__main__":
    main()
