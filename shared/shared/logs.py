import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def init_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if not any(getattr(h, "_scheduling_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._scheduling_handler = True
        root.addHandler(handler)
    root.setLevel((level or "INFO").upper())


def get_logger(service: str) -> logging.Logger:
    return logging.getLogger(service)
