"""Logging configuration helpers for the marketscraper run log."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

ROOT_LOGGER = "marketscraper"
LOG_DIR_ENV = "MARKETSCRAPER_LOG_DIR"
LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_DIR = "logs"
DEFAULT_LEVEL = "INFO"
LOG_FILE_NAME = "scraper.log"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%d.%m-%Y.%H.%M"


class SafeStreamHandler(logging.StreamHandler):
    """A StreamHandler that doesn't crash on encoding errors."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            stream = self.stream
            try:
                stream.write(msg + self.terminator)
                self.flush()
            except UnicodeEncodeError:
                # Windows consoles choke on ₺ and Turkish letters.
                safe_msg = msg.encode("ascii", "replace").decode("ascii")
                stream.write(safe_msg + self.terminator)
                self.flush()
        except Exception:
            self.handleError(record)


def resolve_log_dir(log_dir: str | None = None) -> str:
    """Return *log_dir*, else ``$MARKETSCRAPER_LOG_DIR``, else ``logs``."""

    return log_dir or os.getenv(LOG_DIR_ENV) or DEFAULT_LOG_DIR


def resolve_level(level: str | None = None) -> str:
    """Return *level*, else ``$LOG_LEVEL``, else ``INFO``, uppercased."""

    return (level or os.getenv(LOG_LEVEL_ENV) or DEFAULT_LEVEL).strip().upper()


def _configure_root(log_dir: str | None = None, level: str | None = None) -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if root.handlers:
        return root

    target_dir = resolve_log_dir(log_dir)
    target_level = resolve_level(level)
    os.makedirs(target_dir, exist_ok=True)

    root.setLevel(target_level)
    root.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    file_handler = RotatingFileHandler(
        os.path.join(target_dir, LOG_FILE_NAME),
        maxBytes=1_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(target_level)

    console_handler = SafeStreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(target_level)

    root.addHandler(file_handler)
    root.addHandler(console_handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the shared ``marketscraper`` root.

    Handlers are attached by :func:`configure_logging`, so importing a module
    never creates the log directory.
    """

    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def configure_logging(log_dir: str | None = None, level: str | None = None) -> logging.Logger:
    """(Re)attach the run log handlers.

    Unset arguments fall back to the environment at call time, so values
    loaded from ``.env`` just before this call take effect.
    """

    shutdown_logging()
    return _configure_root(log_dir, level)


def shutdown_logging() -> None:
    """Flush and detach the run log handlers."""

    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        try:
            handler.flush()
            handler.close()
        finally:
            root.removeHandler(handler)


__all__ = [
    "configure_logging",
    "get_logger",
    "resolve_level",
    "resolve_log_dir",
    "shutdown_logging",
]
