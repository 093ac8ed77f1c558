"""
Logging setup shared by the adapter.

Every gateway call runs inside a ``trace_context``. The active trace id is
stamped on each log record by ``TraceContextFilter`` and on each warehouse job
as a label, so a log line can be matched to the job it produced.
"""
import contextvars
import json
import logging
import sys
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional, TextIO

_trace_id = contextvars.ContextVar("bigquery_orm_trace_id", default=None)

# Attributes every LogRecord carries; anything else was passed via ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "trace_id"}

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(trace_id)s] %(name)s: %(message)s"

NOISY_LOGGERS = ("google.auth", "google.api_core", "urllib3")


class TraceContextFilter(logging.Filter):
    """Copies the active trace id onto the record (``-`` when none is active)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = _trace_id.get() or "-"
        return True


@contextmanager
def trace_context(trace_id: Optional[str] = None) -> Iterator[str]:
    """Activates a trace id for the enclosed block.

    Without an explicit id an already active trace is reused, so a ``get``
    issued from inside a save shares the save's id. Otherwise a fresh id is
    generated.
    """
    active = _trace_id.get()
    if trace_id is None and active is not None:
        yield active
        return
    token = _trace_id.set(trace_id or uuid.uuid4().hex)
    try:
        yield _trace_id.get()
    finally:
        _trace_id.reset(token)


def current_trace_id() -> Optional[str]:
    return _trace_id.get()


class JsonFormatter(logging.Formatter):
    """One JSON object per record, including any ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        trace_id = getattr(record, "trace_id", None)
        if trace_id and trace_id != "-":
            payload["trace_id"] = trace_id

        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str = "INFO", json_format: bool = False, stream: Optional[TextIO] = None) -> None:
    """Replaces the root handlers with a single trace-aware stream handler.

    Args:
        level: Root log level name.
        json_format: Emit JSON lines instead of plain text.
        stream: Output stream; defaults to stderr.
    """
    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.addFilter(TraceContextFilter())
    handler.setFormatter(JsonFormatter() if json_format else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
