"""
Logging setup shared by every dnsFlail component.

Each component gets a non-propagating ``dnsflail.<component>`` logger with
two sinks: a rotating JSON Lines file for machine consumption and a plain
console stream for the operator. Load workers tag their records with a
worker ID held in a context variable, so per-query failures can be told
apart when several workers share one counter.

Environment:
    DNSFLAIL_LOG_LEVEL      level name, default INFO
    DNSFLAIL_LOG_FILE       JSONL path, default logs/dnsflail.jsonl ("" = console only)
    DNSFLAIL_LOG_MAX_BYTES  rotation size, default 100 MiB
"""
import contextvars
import json
import logging
import logging.handlers
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

DEFAULT_LOG_FILE = "logs/dnsflail.jsonl"
DEFAULT_MAX_BYTES = 100 * 1024 * 1024
CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_worker_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "worker_id", default=""
)


def set_worker_id(worker_id: str) -> contextvars.Token:
    """Tag records from the current task; returns the token for reset_worker_id."""
    return _worker_id_var.set(worker_id)


def get_worker_id() -> str:
    return _worker_id_var.get()


def reset_worker_id(token: contextvars.Token) -> None:
    _worker_id_var.reset(token)


class JSONLFormatter(logging.Formatter):
    """One JSON object per record; known load-generator extras are lifted to the top level."""

    EXTRA_ATTRS = (
        "qname", "cause", "error_type", "server", "port",
        "requests", "successes", "failures", "outcome", "state",
        "corpus_size", "pace_ms", "report_every", "workers", "duration",
    )

    def __init__(self, component: str = "dnsflail"):
        super().__init__()
        self.component = component
        self.hostname = os.getenv("HOSTNAME", os.getenv("COMPUTERNAME", "unknown"))

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: Dict[str, Any] = {
            "timestamp": created.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "component": self.component,
            "logger": record.name,
            "message": record.getMessage(),
            "hostname": self.hostname,
            "process_id": record.process,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        worker_id = get_worker_id()
        if worker_id:
            entry["worker_id"] = worker_id

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        entry.update(
            (attr, getattr(record, attr))
            for attr in self.EXTRA_ATTRS
            if hasattr(record, attr)
        )
        return json.dumps(entry, default=str)


def _file_handler(path: str, max_bytes: int, backup_count: int) -> Optional[logging.Handler]:
    directory = os.path.dirname(path)
    try:
        if directory:
            os.makedirs(directory, exist_ok=True)
        return logging.handlers.RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    except OSError as exc:
        sys.stderr.write(f"Failed to set up file logging to {path}: {exc}\n")
        return None


def setup_logging(
    component: str = "dnsflail",
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: Optional[int] = None,
    backup_count: int = 10,
    enable_console: bool = True
) -> logging.Logger:
    """(Re)configure the ``dnsflail.<component>`` logger and return it.

    Arguments left as None fall back to the DNSFLAIL_LOG_* environment
    variables. An empty ``log_file`` disables the JSONL sink.
    """
    level_name = (log_level or os.getenv("DNSFLAIL_LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    if log_file is None:
        log_file = os.getenv("DNSFLAIL_LOG_FILE", DEFAULT_LOG_FILE)
    max_bytes = max_bytes or int(os.getenv("DNSFLAIL_LOG_MAX_BYTES", str(DEFAULT_MAX_BYTES)))

    logger = logging.getLogger(f"dnsflail.{component}")
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = []
    if log_file:
        file_handler = _file_handler(log_file, max_bytes, backup_count)
        if file_handler is not None:
            file_handler.setFormatter(JSONLFormatter(component=component))
            handlers.append(file_handler)
    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(console_handler)

    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)

    logger.debug(
        f"Logging configured for {component}",
        extra={"state": "configured"},
    )
    return logger


def get_logger(component: str) -> logging.Logger:
    """Return ``dnsflail.<component>``, setting it up with defaults on first use."""
    logger = logging.getLogger(f"dnsflail.{component}")
    if not logger.handlers:
        logger = setup_logging(component)
    return logger
