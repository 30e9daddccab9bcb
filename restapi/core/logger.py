import re
import sys
import json
import logging
import traceback
from datetime import datetime

from restapi.core.logging_context import ContextFilter

SUCCESS_LEVEL = 25

LOG_COLORS = {
    "DEBUG": "\033[36m",      # Cyan
    "INFO": "\033[37m",       # White
    "SUCCESS": "\033[32m",    # Green
    "WARNING": "\033[33m",    # Yellow
    "ERROR": "\033[31m",      # Red
    "CRITICAL": "\033[35m"    # Magenta
}
RESET_COLOR = "\033[0m"

# Record attributes that are never rendered as extras
_RESERVED_ATTRS = {
    "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "process", "processName", "scope", "name", "taskName",
    "message", "asctime",
}

logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")


class CustomLogger(logging.Logger):
    def success(self, message, *args, **kwargs):
        if self.isEnabledFor(SUCCESS_LEVEL):
            self.log(SUCCESS_LEVEL, message, *args, **kwargs, stacklevel=2)


def stringify_extra(value):
    if isinstance(value, (list, dict)):
        return str(value)
    return value


class CustomFormatter(logging.Formatter):

    def __init__(self, fmt="%(message)s", include_location=False, with_color=False):
        super().__init__(fmt)
        self.include_location = include_location
        self.with_color = with_color

    def format(self, record):
        level_name = record.levelname
        scope = getattr(record, "scope", "")

        location = ""
        if self.include_location:
            location = f"({record.module}:{record.funcName}:{record.lineno})"

        if self.with_color:
            level_color = LOG_COLORS.get(record.levelname, "")
            metadata_line = f"{level_color}[{level_name}]{RESET_COLOR} {scope} {location}".strip()
        else:
            metadata_line = f"{datetime.now().isoformat()} [{level_name}] {scope} {location}".strip()

        message = record.getMessage()
        message_split = message.splitlines() or [""]
        message_line = f"     Message: {message_split[0]}"
        for line in message_split[1:]:
            message_line += f"\n             {line}"

        extra_items = [
            f"{key}: {stringify_extra(value)}"
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        ]
        formatted_log = f"{metadata_line}\n{message_line}"
        if extra_items:
            formatted_log += f"\n     {' '.join(extra_items)}"

        if record.exc_info:
            # clickable "file:line" locations in editors
            lines = traceback.format_exception(*record.exc_info)
            lines = [re.sub(r'File "([^"]+)", line (\d+),', r'File "\1:\2"', line) for line in lines]
            formatted_log += "\n" + "".join(lines)
        return formatted_log


class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_dict = {
            "level": record.levelname,
            "message": record.getMessage(),
            "time": self.formatTime(record, self.datefmt),
            "logger": record.name,
            "location": {
                "module": record.module,
                "function": record.funcName,
                "line": record.lineno,
            },
        }
        if hasattr(record, "scope"):
            log_dict["scope"] = record.scope
        extras = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if extras:
            log_dict["extra"] = extras
        if record.exc_info:
            log_dict["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_dict, ensure_ascii=False, default=str)


def setup_logger(name: str, include_location=False, use_json=None, level=None):
    """
    Create (or fetch) a logger writing to stdout with the plugin formatter.

    ``use_json`` and ``level`` default to RESTAPI_LOG_JSON / RESTAPI_LOG_LEVEL.
    """
    from restapi.core.config import get_log_options

    default_json, default_level = get_log_options()
    if use_json is None:
        use_json = default_json
    if level is None:
        level = default_level

    logging.setLoggerClass(CustomLogger)
    logger = logging.getLogger(name)
    if not any(isinstance(f, ContextFilter) for f in logger.filters):
        logger.addFilter(ContextFilter())

    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setLevel(logging.DEBUG)
        if use_json:
            stream_handler.setFormatter(JSONFormatter())
        else:
            stream_handler.setFormatter(CustomFormatter(include_location=include_location))
        logger.addHandler(stream_handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
