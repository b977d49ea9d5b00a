import logging
import json
import os
from pathlib import Path
import threading

from flask import has_request_context, request
from flask_login import current_user


LOGGER_NAME = "pharmacy_inventory"


class SingletonLogger:
    """
    Configures the "pharmacy_inventory" logger once per process.

    Module loggers ("pharmacy_inventory.services.stock", ...) are children of it
    and propagate to its handlers, so every record lands in the same JSON files.
    """
    _instance = None
    _lock = threading.Lock()
    _root = None

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SingletonLogger, cls).__new__(cls)
        return cls._instance

    def get_logger(self, name: str = LOGGER_NAME) -> logging.Logger:
        """
        Get a logger below the application logger.

        Args:
            name (str): Dotted logger name; names outside "pharmacy_inventory"
                are nested under it

        Returns:
            logging.Logger: The named logger
        """
        if self._root is None:
            with self._lock:
                if self._root is None:
                    self._root = self._configure_root()
        if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
            return logging.getLogger(name)
        return self._root.getChild(name)

    def _configure_root(self) -> logging.Logger:
        """
        Attach console and file handlers to the application logger.

        LOG_DIR selects the directory for the log files (default: ./logs),
        LOG_LEVEL the console level (default: DEBUG).
        """
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        # Clear any existing handlers
        logger.handlers.clear()

        formatter = JsonFormatter({
            "timestamp": "asctime",
            "level": "levelname",
            "logger": "name",
            "function": "funcName",
            "line": "lineno",
            "path": "request_path",
            "user": "request_user",
            "message": "message"
        })
        context = RequestContextFilter()

        logs_dir = Path(os.environ.get("LOG_DIR", "logs"))
        logs_dir.mkdir(parents=True, exist_ok=True)

        # Fixed filenames, cleared on each run
        file_handler = logging.FileHandler(logs_dir / "pharmacy_inventory.log", mode='w', encoding='utf-8')
        file_handler.setLevel(logging.INFO)

        error_file_handler = logging.FileHandler(logs_dir / "errors.log", mode='w', encoding='utf-8')
        error_file_handler.setLevel(logging.ERROR)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, os.environ.get("LOG_LEVEL", "DEBUG").upper(), logging.DEBUG))

        for handler in (file_handler, error_file_handler, console_handler):
            # Handler filters also see records propagated from module loggers
            handler.addFilter(context)
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger


class RequestContextFilter(logging.Filter):
    """Stamp each record with the current request path and the logged-in login."""

    def filter(self, record) -> bool:
        record.request_path = None
        record.request_user = None
        if has_request_context():
            record.request_path = request.path
            if current_user.is_authenticated:
                record.request_user = getattr(current_user, "login", None)
        return True


class JsonFormatter(logging.Formatter):
    """
    Formatter that outputs JSON strings after parsing the LogRecord.

    @param dict fmt_dict: Key: logging format attribute pairs. Defaults to {"message": "message"}.
    @param str time_format: time.strftime() format string. Default: "%Y-%m-%dT%H:%M:%S"
    @param str msec_format: Microsecond formatting. Appended at the end. Default: "%s.%03dZ"
    """
    def __init__(self, fmt_dict: dict = None, time_format: str = "%Y-%m-%dT%H:%M:%S", msec_format: str = "%s.%03dZ"):
        super().__init__()
        self.fmt_dict = fmt_dict if fmt_dict is not None else {"message": "message"}
        self.default_time_format = time_format
        self.default_msec_format = msec_format
        self.datefmt = None

    def usesTime(self) -> bool:
        return "asctime" in self.fmt_dict.values()

    def formatMessage(self, record) -> dict:
        """
        Return the selected LogRecord attributes as a dict.
        Attributes missing from the record (no filter ran) come out as None.
        """
        return {fmt_key: record.__dict__.get(fmt_val) for fmt_key, fmt_val in self.fmt_dict.items()}

    def format(self, record) -> str:
        record.message = record.getMessage()

        if self.usesTime():
            record.asctime = self.formatTime(record, self.datefmt)

        message_dict = self.formatMessage(record)

        if record.exc_info:
            # Cache the traceback text to avoid converting it multiple times
            if not record.exc_text:
                record.exc_text = self.formatException(record.exc_info)

        if record.exc_text:
            message_dict["exc_info"] = record.exc_text

        if record.stack_info:
            message_dict["stack_info"] = self.formatStack(record.stack_info)

        # Drop empty request fields outside a request
        return json.dumps({k: v for k, v in message_dict.items() if v is not None or k == "message"},
                          default=str, ensure_ascii=False)


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Get the logger for a module.

    Args:
        name (str): Dotted name, e.g. "pharmacy_inventory.routes.items"

    Returns:
        logging.Logger: A child of the application logger
    """
    return SingletonLogger().get_logger(name)
