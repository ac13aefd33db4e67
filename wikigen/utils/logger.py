import logging
import sys
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

LOG_FILE_NAME = "wikigen.json.log"


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""
    def format(self, record):
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "line": record.lineno,
        }
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj)


def configure_logging(level: str = "INFO", log_dir: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Configure the ``wikigen`` logger.

    Writes human-readable logs to stderr and, when ``log_dir`` is given,
    structured JSON logs to ``<log_dir>/wikigen.json.log``.
    """
    logger = logging.getLogger("wikigen")
    logger.setLevel(level.upper())

    # Re-configuring replaces handlers instead of stacking them
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    ))
    logger.addHandler(console_handler)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path / LOG_FILE_NAME)
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)

    return logger
