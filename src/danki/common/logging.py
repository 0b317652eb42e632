"""Logging setup for danki commands.

Records may carry package context: ``archive`` (package name),
``archive_index`` (position in the batch), ``entry`` (zip entry) and
``category`` (error category of a skipped package). ``LogContext`` attaches
the package fields for a block of code; ``extra=`` works for single calls.
The JSON formatter writes them as top-level keys, the detailed formatter
shows them as a ``[name#index]`` tag.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import DankiError
from .logging_config import LoggingConfig

CONTEXT_FIELDS = ("archive", "archive_index", "entry", "category")

# Marks handlers installed by setup_logging so a second call replaces only those
_HANDLER_MARK = "_danki_handler"


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Package context fields present on a record."""
    return {
        field: getattr(record, field)
        for field in CONTEXT_FIELDS
        if getattr(record, field, None) is not None
    }


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, used for log files and ``format = "json"``."""

    def format(self, record: logging.LogRecord) -> str:
        data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data.update(record_context(record))

        if record.exc_info and record.exc_info[1] is not None:
            error = record.exc_info[1]
            data["error"] = {
                "type": type(error).__name__,
                "message": error.message if isinstance(error, DankiError) else str(error),
                "traceback": self.formatException(record.exc_info),
            }
            if isinstance(error, DankiError) and error.context:
                data["error"]["context"] = error.context

        return json.dumps(data, default=str)


class SimpleFormatter(logging.Formatter):
    """Level and message, for interactive use."""

    def __init__(self) -> None:
        super().__init__(fmt="%(levelname)-8s | %(message)s")


class DetailedFormatter(logging.Formatter):
    """Timestamped lines with source location and package tag."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(package_tag)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        archive = getattr(record, "archive", None)
        if archive is None:
            record.package_tag = ""
        elif getattr(record, "archive_index", None) is None:
            record.package_tag = f"[{archive}] "
        else:
            record.package_tag = f"[{archive}#{record.archive_index}] "
        return super().format(record)


FORMATTERS = {
    "simple": SimpleFormatter,
    "detailed": DetailedFormatter,
    "json": StructuredFormatter,
}


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """Install console and optional file handlers on the root logger.

    The console handler writes to stderr so command output on stdout stays
    clean. The file handler rotates and always writes JSON. Handlers from a
    previous call are replaced; handlers installed by others are kept.

    Args:
        config: Logging section of the danki config, defaults when omitted
    """
    config = config or LoggingConfig()
    root = logging.getLogger()
    root.setLevel(config.level)

    for handler in [h for h in root.handlers if getattr(h, _HANDLER_MARK, False)]:
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(FORMATTERS[config.format]())
    _install(root, console)

    if config.file:
        log_file = Path(config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=config.file_max_mb * 1024 * 1024,
            backupCount=config.file_backups,
            encoding="utf-8",
        )
        file_handler.setFormatter(StructuredFormatter())
        _install(root, file_handler)


def _install(root: logging.Logger, handler: logging.Handler) -> None:
    setattr(handler, _HANDLER_MARK, True)
    root.addHandler(handler)


class LogContext:
    """Attach package context fields to every record created inside the block.

    Contexts nest; the inner one adds to the outer one. A field set by the
    context cannot also be passed through ``extra=`` inside the block.
    """

    def __init__(self, logger: logging.Logger, **fields: Any) -> None:
        unknown = set(fields) - set(CONTEXT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown log context field(s): {', '.join(sorted(unknown))}")
        self.logger = logger
        self.fields = fields
        self._previous_factory: Optional[Any] = None

    def __enter__(self) -> "LogContext":
        previous = self._previous_factory = logging.getLogRecordFactory()
        fields = self.fields

        def factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
            record = previous(*args, **kwargs)
            for key, value in fields.items():
                setattr(record, key, value)
            return record

        logging.setLogRecordFactory(factory)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        logging.setLogRecordFactory(self._previous_factory)
