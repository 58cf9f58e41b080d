import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Route all application logs to stdout with a single timestamped handler."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    # Avoid stacking handlers when the app is reloaded in the same process
    for handler in list(root.handlers):
        if getattr(handler, "_regview", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._regview = True
    root.addHandler(handler)

    # httpx logs every request at INFO; keep it quiet unless debugging
    logging.getLogger("httpx").setLevel(logging.DEBUG if level.upper() == "DEBUG" else logging.WARNING)
