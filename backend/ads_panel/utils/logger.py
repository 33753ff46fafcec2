"""
Logging configuration shared by the API process and start_server.py.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

class JSONFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False, default=str)

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

def setup_logging(log_level: str = "INFO", log_format: str = "text", stream: Optional[object] = None) -> None:
    """Configure the root logger once; repeated calls replace our handler."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for handler in list(root.handlers):
        if getattr(handler, "_ads_panel", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    handler._ads_panel = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    # httpx logs every request line at INFO, including the access token in the query string
    logging.getLogger("httpx").setLevel(logging.WARNING)
