import logging

logger = logging.getLogger("uipatch")
logger.addHandler(logging.NullHandler())


def enable_debug() -> None:
    """Enable debug logging for uipatch."""
    logger.setLevel(logging.DEBUG)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[uipatch] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
