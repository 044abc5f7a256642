import logging
import json
import os
import sys
from datetime import datetime, timezone


LOG_DIR = os.getenv("CAMPUS_BUDDY_LOG_DIR", "logs")

# LogRecord attributes that belong to logging itself, not to `extra=`
_RESERVED_ATTRS = {
    "name", "msg", "args", "levelname", "levelno",
    "pathname", "filename", "module", "exc_info",
    "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread",
    "threadName", "processName", "process", "message",
    "taskName",
}

# Third-party loggers that flood INFO with HTTP chatter
_NOISY_LOGGERS = (
    "urllib3",
    "httpx",
    "httpcore",
    "hpack",
    "openai",
    "postgrest",
    "supabase",
    "google",
)


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Anything passed through ``extra=`` lands at the top level of the
    object; values that json cannot encode are stringified.
    """

    def format(self, record: logging.LogRecord) -> str:

        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():

            if key.startswith("_") or key in _RESERVED_ATTRS:
                continue

            if key in log_data:
                log_data[f"extra_{key}"] = value
            else:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = "INFO", log_to_file: bool = True):

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(console_handler)

    if log_to_file:

        os.makedirs(LOG_DIR, exist_ok=True)

        file_handler = logging.FileHandler(os.path.join(LOG_DIR, "campus_buddy.log"))
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
