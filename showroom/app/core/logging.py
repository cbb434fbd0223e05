import logging
import sys

from showroom.app.core.settings import LOG_LEVEL


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Send application logs to stdout with a single shared format."""
    logging.basicConfig(
        stream=sys.stdout,
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
