import logging
import pathlib

logger = logging.getLogger("rapid-api")

LOG_FORMAT = "%(asctime)s [%(levelno)s] [%(name)s %(process)d] %(message)s"


def configure_logger(path: pathlib.Path | None = None, level: int = logging.INFO) -> None:
    handler: logging.Handler
    if path is None:
        handler = logging.StreamHandler()
    else:
        handler = logging.FileHandler(path, encoding="UTF-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    for previous in list(logger.handlers):
        logger.removeHandler(previous)
        previous.close()
    logger.addHandler(handler)
    logger.setLevel(level)
