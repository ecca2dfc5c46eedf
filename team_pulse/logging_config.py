"""
Logging setup for the Team Pulse service.
"""

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """
    Attach a console handler to the root logger.

    Does nothing when the root logger already has handlers, so repeated
    calls (tests, multiple ``create_app`` invocations) are harmless.

    Args:
        level: Logging level name, case insensitive
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)
