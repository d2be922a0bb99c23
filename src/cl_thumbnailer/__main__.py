"""Serve the thumbnailer over HTTP: ``python -m cl_thumbnailer``."""

import uvicorn
from loguru import logger

from .config import get_settings
from .master import create_app


def main() -> None:
    settings = get_settings()
    logger.info(f"Starting cl_thumbnailer on {settings.host}:{settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level="info")


if __name__ == "__main__":
    main()
