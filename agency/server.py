"""
Process entry point: check the database, then serve the app with uvicorn.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from agency.config import get_settings
from agency.dependencies import get_document_store

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the agency API server.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    settings = get_settings()
    if not settings.database_url and not settings.use_in_memory_backends:
        logger.error("DATABASE_URL is not set; refusing to start")
        return 1
    if not settings.jwt_secret:
        logger.warning("JWT_SECRET is not set; admin login will fail")

    try:
        get_document_store().ping()
    except Exception as exc:
        logger.error("Database connection failed: %s", exc)
        return 1
    logger.info("Database connection established")

    uvicorn.run("agency.app:app", host=args.host, port=args.port, reload=args.reload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
