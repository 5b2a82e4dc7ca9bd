import logging
from typing import Optional
from recurate.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Install root handlers: stderr always, plus a file when LOG_FILE is set.

    Safe to call more than once; handlers are only added the first time.
    """
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())
    if getattr(root, "_recurate_configured", False):
        return

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    log_file = log_file or settings.LOG_FILE
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root._recurate_configured = True
