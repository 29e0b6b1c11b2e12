import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(verbose: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the root logger for command line use.

    Parameters:
        verbose (bool): DEBUG level when True, INFO otherwise.
        log_file (str): Optional path of a rotating log file (5 MB, 2 backups).

    Returns:
        logging.Logger: The configured root logger.
    """
    root = logging.getLogger()
    if root.hasHandlers():
        root.handlers.clear()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        directory = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(directory, exist_ok=True)
        handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=2)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # numba's own compiler logging is extremely chatty at DEBUG
    logging.getLogger("numba").setLevel(logging.WARNING)
    return root
