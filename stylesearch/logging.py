"""structlog setup shared by the API entrypoint and scripts."""

from __future__ import annotations

import logging
import sys
from typing import IO

import structlog

from stylesearch.config import settings

_LOG_LEVEL_MAP: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class _JsonLinesTee:
    """Mirror rendered log lines to stdout and an append-only file.

    A file that cannot be opened or written is dropped; stdout keeps working.
    """

    def __init__(self, file_path: str) -> None:
        self._path = file_path
        self._file: IO[str] | None = None
        try:
            self._file = open(file_path, "a")  # noqa: SIM115
        except OSError as exc:
            print(f"WARNING: log file {file_path!r} unavailable: {exc}", file=sys.stderr)

    def write(self, data: str) -> None:
        sys.stdout.write(data)
        if self._file is None:
            return
        try:
            self._file.write(data)
            self._file.flush()
        except (OSError, ValueError):
            self._file = None
            print(f"WARNING: writes to {self._path!r} failed, file logging off", file=sys.stderr)

    def flush(self) -> None:
        sys.stdout.flush()


def resolve_level(name: str) -> int:
    return _LOG_LEVEL_MAP.get(name.upper(), logging.INFO)


def configure_logging() -> None:
    """Console output in development, JSON lines elsewhere.

    LOG_FILE additionally tees every line to a file. Rendering follows
    ENVIRONMENT, not the presence of the file.
    """
    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.environment == "development"
        else structlog.processors.JSONRenderer()
    )

    if settings.log_file:
        logger_factory = structlog.PrintLoggerFactory(file=_JsonLinesTee(settings.log_file))  # type: ignore[arg-type]
    else:
        logger_factory = structlog.PrintLoggerFactory()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(resolve_level(settings.log_level)),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=True,
    )
