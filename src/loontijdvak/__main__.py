"""Run the loontijdvak engine API under uvicorn."""

import logging

import uvicorn

from loontijdvak.config import get_settings
from loontijdvak.logging_config import configure_logging

logger = logging.getLogger("loontijdvak")


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    # the URL itself may carry credentials
    backend = settings.database_url.split(":", 1)[0]
    logger.info(
        "Starting loontijdvak engine API on %s:%d (database backend: %s)",
        settings.HOST,
        settings.PORT,
        backend,
    )
    uvicorn.run(
        "loontijdvak.api.app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
