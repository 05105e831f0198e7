"""Run the service with ``python -m shrink``."""

import sys

from loguru import logger
from pydantic import ValidationError


def main() -> None:
    try:
        from shrink.core.config import settings
    except ValidationError as e:
        logger.critical(f"Invalid configuration, refusing to start: {e}")
        sys.exit(1)

    import uvicorn

    uvicorn.run(
        "shrink.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
