"""Command-line entry point for the n8n user manager API."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from user_manager.config import Settings

logger = logging.getLogger("n8n_user_manager.main")

_LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="n8n user manager API")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address for the API")
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the HTTP API (default: N8N_USER_MANAGER_PORT or 3000)",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=_LOG_LEVELS,
        help="Logging verbosity (default: info)",
    )
    return parser.parse_args(list(argv) if argv is not None else sys.argv[1:])


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc


def _serve(*, settings: Settings, host: str, port: int, log_level: str) -> None:
    from user_manager.service import create_app, describe_endpoints
    import uvicorn

    app = create_app(settings=settings)

    logger.info("N8N User Manager API running on port %s", port)
    logger.info("Available endpoints:")
    for route, summary in describe_endpoints().items():
        logger.info("  %s - %s", route, summary)

    # uvicorn stops accepting connections on SIGTERM, waits for in-flight
    # requests and then runs the lifespan shutdown that drains the pool.
    uvicorn.run(app, host=host, port=port, log_level=log_level)


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    settings = _load_settings()
    _serve(
        settings=settings,
        host=args.host,
        port=args.port if args.port is not None else settings.port,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
