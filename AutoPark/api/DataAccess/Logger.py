from AutoPark.api.Models.User import User
from logging.handlers import TimedRotatingFileHandler
import os
import logging
import json
from datetime import datetime, timezone


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_entry = {
            "endpoint": getattr(record, "endpoint", ""),
            "user": getattr(record, "user", None),
            "role": getattr(record, "role", None),
            "level": record.levelname,
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S"),
        }
        if record.levelno >= logging.WARNING:
            log_entry["message"] = record.getMessage()
        return json.dumps(log_entry)


class Logger:
    """Access log: one JSON line per authenticated call, rotated at midnight."""

    def __init__(self, path: str, name: str = "autopark.access"):
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        self.path = path
        self.logger = logging.getLogger(f"{name}.{abs(hash(os.path.abspath(path)))}")
        self.logger.setLevel(logging.INFO)
        self.logger.propagate = False

        if not self.logger.handlers:
            handler = TimedRotatingFileHandler(path, when="midnight", utc=True, encoding="utf-8")
            handler.namer = lambda name: name.replace("access.log.", "access-") + ".log"
            handler.setFormatter(JsonFormatter())
            self.logger.addHandler(handler)


    def log(self, user: User, endpoint: str):
        self.logger.info(
            "access",
            extra={"endpoint": endpoint, "user": user.username, "role": user.role},
        )


    def error(self, endpoint: str, message: str, user: User = None):
        self.logger.error(
            message,
            extra={
                "endpoint": endpoint,
                "user": user.username if user is not None else None,
                "role": user.role if user is not None else None,
            },
        )


    def close(self):
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)
