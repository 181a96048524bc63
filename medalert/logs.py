import logging
import os

PACKAGE_LOGGER_NAME = "medalert"
ERROR_LOG_FILE = "errors.log"


def configure_error_log(log_dir: str) -> logging.Handler:
    """Write ERROR records from every medalert.* logger to <log_dir>/errors.log.

    Idempotent: a second call for the same file returns the existing handler.
    """
    os.makedirs(log_dir, exist_ok=True)
    path = os.path.abspath(os.path.join(log_dir, ERROR_LOG_FILE))
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    for handler in package_logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == path:
            return handler
    fh = logging.FileHandler(path, encoding="utf-8")
    fh.setLevel(logging.ERROR)
    fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    package_logger.addHandler(fh)
    return fh
