"""
asgi.py -- Process entry point for authapi.

Run with:  python asgi.py
           uvicorn asgi:app --reload

main() validates configuration before uvicorn binds the port: a missing
JWT_SECRET, MONGO_URI or database setting exits with status 1 instead of
serving requests that cannot be authenticated.
"""

import logging
import sys

import uvicorn

from api.main import app
from core.config import get_settings

logger = logging.getLogger("authapi.api")

__all__ = ["app", "main"]


def main() -> None:
    try:
        settings = get_settings()
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        sys.exit(1)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
