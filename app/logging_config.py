import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Installs the root handler used by every module logger."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # httpx logs every request at INFO
    if level != "DEBUG":
        logging.getLogger("httpx").setLevel(logging.WARNING)
