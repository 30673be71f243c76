# main.py
import logging

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from voicecal.core.config import settings  # noqa: E402
from voicecal.app import create_app  # noqa: E402

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = create_app(settings)


def run():
    """Entry point: SIGTERM/SIGINT stop accepting connections, drain, then force exit after the grace period."""
    logger.info(f"Server running on port {settings.PORT}")
    if settings.PUBLIC_URL:
        logger.info(f"Public URL: {settings.PUBLIC_URL}")
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        timeout_graceful_shutdown=settings.SHUTDOWN_GRACE_SECONDS,
    )


if __name__ == "__main__":
    run()
