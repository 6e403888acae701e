import logging
import sys
from typing import Optional, Union

# Thread name separates the path-generator worker from the viewer loop
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"


def configure_logging(level: Union[str, int] = "INFO", logfile: Optional[str] = None) -> None:
    """Send log records to stdout, and also to logfile when one is given."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if logfile:
        handlers.append(logging.FileHandler(logfile, encoding="utf-8"))
    logging.basicConfig(level=level.upper() if isinstance(level, str) else level,
                        format=LOG_FORMAT, handlers=handlers, force=True)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
