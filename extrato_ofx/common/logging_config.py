"""
Structured JSON logging.

Every record is one JSON line. Keyword arguments given to a logger from
get_logger() become top-level fields:

    logger.debug("Row skipped", bank="itau", reason="balance_marker")

The id of the HTTP request being served is kept in a context variable, so
it follows the request into the worker thread that runs the conversion.
"""
import datetime
import json
import logging
import os
from contextvars import ContextVar
from typing import Any, MutableMapping, Optional, Tuple

_request_id: ContextVar[str] = ContextVar("request_id", default="GLOBAL")

# Libraries that flood the log at DEBUG while reading a PDF
NOISY_LOGGERS = ("pdfminer", "pdfplumber", "multipart")

_RESERVED_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel", "extra"})

# Names taken by Logger.log() itself; such fields are stored with a prefix
_SHADOWED_KWARGS = frozenset({"level", "msg"})


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.datetime.fromtimestamp(record.created).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": _request_id.get(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        fields = getattr(record, "extra_fields", None)
        if isinstance(fields, dict):
            entry.update(fields)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(log_level: int = logging.INFO, log_file: Optional[str] = "logs/app.log") -> None:
    """
    Route the root logger to stderr and, when log_file is set, to that file.
    Calling it again replaces the previous handlers.
    """
    formatter = JSONFormatter()
    handlers = [logging.StreamHandler()]
    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    get_logger(__name__).info("Logging configured", log_level=logging.getLevelName(log_level), file=log_file)


def set_request_id(request_id: str) -> None:
    _request_id.set(request_id)


def get_request_id() -> str:
    return _request_id.get()


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """
    Collects keyword arguments into record.extra_fields. Fields bound when
    the adapter is created are merged under the per-call ones.
    """
    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.pop("extra", None) or {})
        fields = dict(self.extra or {})
        fields.update(extra.get("extra_fields") or {})

        call_kwargs = {}
        for key, value in kwargs.items():
            if key in _RESERVED_KWARGS:
                call_kwargs[key] = value
            elif key == "extra_fields" and isinstance(value, dict):
                fields.update(value)
            else:
                fields[key] = value

        extra["extra_fields"] = fields
        call_kwargs["extra"] = extra
        return msg, call_kwargs

    def log(self, *args: Any, **kwargs: Any) -> None:
        # info(), debug() and friends forward here as log(level, msg, **kwargs)
        for key in [k for k in kwargs if k in _SHADOWED_KWARGS]:
            kwargs[f"field_{key}"] = kwargs.pop(key)
        super().log(*args, **kwargs)


def get_logger(name: str, **bound: Any) -> StructuredLoggerAdapter:
    """Structured logger; bound fields are attached to every record."""
    return StructuredLoggerAdapter(logging.getLogger(name), bound)
