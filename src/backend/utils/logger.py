# src/backend/utils/logger.py
import sys
import logging
from typing import List, Optional

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Console logging, plus a log file when one is configured.
    If the file cannot be opened we keep running with stderr only.
    """
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_error: Optional[OSError] = None

    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        except OSError as e:
            file_error = e

    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )

    if file_error is not None:
        logging.getLogger(__name__).warning(
            "Falling back to stderr logging because %s could not be opened: %s",
            log_file,
            file_error,
        )
