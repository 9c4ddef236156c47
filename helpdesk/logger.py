import logging
import json
import os
from pathlib import Path
import threading


class SingletonLogger:
    """
    Singleton logger that configures the "helpdesk" logger once per process.
    Named loggers returned by get_logger() are children of it and share its handlers.
    """
    _instance = None
    _lock = threading.Lock()
    _logger = None

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SingletonLogger, cls).__new__(cls)
        return cls._instance

    def get_logger(self, name: str = "helpdesk") -> logging.Logger:
        """
        Get a logger below the configured root logger.

        Args:
            name (str): Dotted logger name, e.g. "helpdesk.business.tickets"

        Returns:
            logging.Logger: Logger sharing the singleton's handlers
        """
        if self._logger is None:
            with self._lock:
                if self._logger is None:
                    self._logger = self._create_logger()
        if not name or name == "helpdesk":
            return self._logger
        if not name.startswith("helpdesk."):
            name = f"helpdesk.{name}"
        return logging.getLogger(name)

    def _create_logger(self) -> logging.Logger:
        """
        Create the root "helpdesk" logger with console and optional file handlers.

        Returns:
            logging.Logger: Configured logger instance
        """
        level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

        logger = logging.getLogger("helpdesk")
        logger.setLevel(level)
        logger.handlers.clear()
        logger.propagate = False

        formatter = JsonFormatter({
            "time": "asctime",
            "level": "levelname",
            "logger": "name",
            "module": "module",
            "function": "funcName",
            "line": "lineno",
            "message": "message"
        })

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if os.environ.get("LOG_TO_FILE", "False").lower() in ("true", "1", "yes", "on"):
            logs_dir = Path(os.environ.get("LOG_DIR", "logs"))
            logs_dir.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(logs_dir / "helpdesk.log", encoding='utf-8')
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

            error_file_handler = logging.FileHandler(logs_dir / "errors.log", encoding='utf-8')
            error_file_handler.setLevel(logging.ERROR)
            error_file_handler.setFormatter(formatter)
            logger.addHandler(error_file_handler)

        return logger


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record.

    fields maps output keys to LogRecord attribute names; "asctime" is filled
    in only when one of the fields asks for it.
    """
    def __init__(self, fields: dict = None, time_format: str = "%Y-%m-%dT%H:%M:%S"):
        super().__init__()
        self.fields = fields or {"message": "message"}
        self.default_time_format = time_format
        self.default_msec_format = "%s.%03dZ"

    def usesTime(self) -> bool:
        return "asctime" in self.fields.values()

    def format(self, record) -> str:
        record.message = record.getMessage()
        if self.usesTime():
            record.asctime = self.formatTime(record)

        payload = {key: getattr(record, attr) for key, attr in self.fields.items()}

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            payload["exc_info"] = record.exc_text
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(payload, default=str)


def get_logger(name: str = "helpdesk") -> logging.Logger:
    """
    Get a logger attached to the singleton "helpdesk" logger.

    Args:
        name (str): Dotted logger name

    Returns:
        logging.Logger: Logger instance
    """
    return SingletonLogger().get_logger(name)
