import logging
import os
from logging.handlers import RotatingFileHandler

from utils.app_config import CONFIG_DIR

LOG_FILE = CONFIG_DIR / "fintrack.log"
_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(level: str | None = None, log_file=LOG_FILE) -> logging.Logger:
    """Configure the root logger once: stderr plus a rotating file.

    Level comes from the argument, then FINTRACK_LOG_LEVEL, then INFO.
    """
    root = logging.getLogger()
    requested = (level or os.environ.get("FINTRACK_LOG_LEVEL", "INFO")).upper()
    try:
        root.setLevel(requested)
        requested = None
    except ValueError:
        root.setLevel(logging.INFO)
    formatter = logging.Formatter(_FORMAT)

    if root.handlers:
        for h in root.handlers:
            h.setFormatter(formatter)
    else:
        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        root.addHandler(stream)

        if log_file is not None:
            try:
                log_file.parent.mkdir(parents=True, exist_ok=True)
                file_handler = RotatingFileHandler(
                    log_file, maxBytes=512 * 1024, backupCount=3, encoding="utf-8"
                )
                file_handler.setFormatter(formatter)
                root.addHandler(file_handler)
            except OSError:
                root.warning("File logging disabled: cannot write %s", log_file)

    if requested:
        root.warning("Unknown log level %r, using INFO", requested)
    return root
