#!/usr/bin/env python3
"""
Запуск HTTP-триггера недельной рассылки (uvicorn)
"""

import sys

import uvicorn

from core.config.settings import settings, validate_settings
from core.exceptions import ConfigurationError
from core.logging.logger import logger, setup_logging


def main() -> int:
    setup_logging(settings.log_level, settings.log_format)
    try:
        validate_settings(settings)
    except ConfigurationError as e:
        logger.critical("Configuration is incomplete", missing=e.missing)
        return 1

    logger.info("Starting API", host=settings.api_host, port=settings.api_port)
    uvicorn.run(
        "apps.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
