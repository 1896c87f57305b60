import time
import json
import logging
from datetime import datetime

logger = logging.getLogger("autopark.performance")


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_record = {
            "method": getattr(record, "method", ""),
            "endpoint": getattr(record, "endpoint", ""),
            "status": getattr(record, "status", None),
            "duration_ms": getattr(record, "duration_ms", 0),
            "timestamp": datetime.now().isoformat(),
            "level": record.levelname,
        }
        return json.dumps(log_record)


def setup_performance_log(path: str):
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    file_handler = logging.FileHandler(path, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(JsonFormatter())
    logger.addHandler(file_handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


class PerformanceTracer:
    """ASGI middleware: logs request durations, warns on slow requests and
    adds an x-response-time header."""

    def __init__(self, app, alert_threshold_ms=300):
        self.app = app
        self.alert_threshold_ms = alert_threshold_ms

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        start_time = time.perf_counter()
        request_path = scope.get("path", "")
        method = scope.get("method", "")

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
                extra = {
                    "method": method,
                    "endpoint": request_path,
                    "status": message.get("status"),
                    "duration_ms": duration_ms,
                }
                logger.info("request", extra=extra)

                if duration_ms > self.alert_threshold_ms:
                    logger.warning(
                        "Slow request detected: %s took %.2fms", request_path, duration_ms, extra=extra
                    )

                headers = list(message.get("headers", []))
                headers.append((b"x-response-time", f"{duration_ms:.2f}ms".encode()))
                message["headers"] = headers

            await send(message)

        await self.app(scope, receive, send_wrapper)
