import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# One handler per process; both apps share it when imported together
_handler = logging.StreamHandler()
_handler.setFormatter(logging.Formatter(LOG_FORMAT))


def configure_logging(level: str = "INFO") -> None:
    """
    Install the stream handler on the root logger.

    Safe to call once per app; a second call only adjusts the level.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())
    if _handler not in root.handlers:
        root.addHandler(_handler)
