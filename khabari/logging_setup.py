import logging
import sys

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a stdout handler for the ``khabari`` loggers.

    Safe to call more than once; ``basicConfig`` is a no-op when the root
    logger already has handlers.
    """
    logging.basicConfig(
        level=logging.WARNING,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("khabari").setLevel(level.upper())
