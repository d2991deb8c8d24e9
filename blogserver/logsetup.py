"""JSON logging to a size-rotated file, optionally mirrored on standard output."""

import json
import logging
import os
import re
import sys
import tempfile
import time
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List

from blogserver.config import Zap

LOGGER_NAME = "blogserver"

DPANIC = 44
PANIC = 47
FATAL = logging.CRITICAL

_MEGABYTE = 1024 * 1024
_DEFAULT_MAX_SIZE_MB = 100
_SECONDS_PER_DAY = 24 * 60 * 60

_LEVEL_BY_NAME = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "dpanic": DPANIC,
    "panic": PANIC,
    "fatal": FATAL,
}

_LEVEL_NAMES = (
    (FATAL, "FATAL"),
    (PANIC, "PANIC"),
    (DPANIC, "DPANIC"),
    (logging.ERROR, "ERROR"),
    (logging.WARNING, "WARN"),
    (logging.INFO, "INFO"),
)


def _parse_level(text: str) -> int:
    if text == "":
        return logging.INFO
    if text in _LEVEL_BY_NAME:
        return _LEVEL_BY_NAME[text]
    if text.isupper() and text.lower() in _LEVEL_BY_NAME:
        return _LEVEL_BY_NAME[text.lower()]
    raise ValueError(f'unrecognized level: "{text}"')


def _level_name(levelno: int) -> str:
    for threshold, name in _LEVEL_NAMES:
        if levelno >= threshold:
            return name
    return "DEBUG"


class JsonFormatter(logging.Formatter):
    """Formats each record as one JSON object with level, time, caller and msg.

    Extra structured values passed as ``extra={"fields": {...}}`` are merged in.
    """

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created).astimezone()
        payload = {
            "level": _level_name(record.levelno),
            "time": stamp.strftime("%Y-%m-%dT%H:%M:%S.")
            + f"{stamp.microsecond // 1000:03d}"
            + stamp.strftime("%z"),
            "caller": f"{Path(record.pathname).parent.name}/{Path(record.pathname).name}:{record.lineno}",
            "msg": record.getMessage(),
        }
        fields = getattr(record, "fields", None)
        if isinstance(fields, dict):
            payload.update(fields)
        if record.exc_info and record.exc_info[1] is not None:
            payload["error"] = str(record.exc_info[1])
            payload["stacktrace"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class _RollingFileHandler(RotatingFileHandler):
    """Rotates by size into timestamped backups, pruned by count and age."""

    def __init__(self, filename: str, max_size_mb: int, max_backups: int, max_age_days: int):
        Path(filename).parent.mkdir(parents=True, exist_ok=True)
        super().__init__(
            filename,
            maxBytes=(max_size_mb or _DEFAULT_MAX_SIZE_MB) * _MEGABYTE,
            encoding="utf-8",
            delay=True,
        )
        self.max_backups = max_backups
        self.max_age_days = max_age_days
        base = Path(self.baseFilename)
        self._backup_pattern = re.compile(
            re.escape(base.stem)
            + r"-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.\d{3}"
            + re.escape(base.suffix)
        )

    def backups(self) -> List[Path]:
        """Existing backup files, newest first."""
        base = Path(self.baseFilename)
        found = [
            path
            for path in base.parent.iterdir()
            if path.is_file() and self._backup_pattern.fullmatch(path.name)
        ]
        return sorted(found, key=lambda path: path.name, reverse=True)

    def doRollover(self) -> None:
        if self.stream:
            self.stream.close()
            self.stream = None
        base = Path(self.baseFilename)
        if base.exists():
            now = datetime.now()
            stamp = now.strftime("%Y-%m-%dT%H-%M-%S.") + f"{now.microsecond // 1000:03d}"
            os.replace(base, base.with_name(f"{base.stem}-{stamp}{base.suffix}"))
        self._prune()

    def _prune(self) -> None:
        kept = self.backups()
        doomed: List[Path] = []
        if self.max_backups > 0:
            doomed.extend(kept[self.max_backups:])
            kept = kept[: self.max_backups]
        if self.max_age_days > 0:
            cutoff = time.time() - self.max_age_days * _SECONDS_PER_DAY
            doomed.extend(path for path in kept if path.stat().st_mtime < cutoff)
        for path in doomed:
            path.unlink(missing_ok=True)


def _default_filename() -> str:
    program = Path(sys.argv[0]).name if sys.argv and sys.argv[0] else "blogserver"
    return os.path.join(tempfile.gettempdir(), f"{program}-lumberjack.log")


def init_logger(zap: Zap) -> logging.Logger:
    """Configure and return the application logger from the log settings.

    Raises ``ValueError`` if the configured level is not recognised.
    """
    level = _parse_level(zap.level)
    formatter = JsonFormatter()
    handlers: List[logging.Handler] = [
        _RollingFileHandler(
            zap.filename or _default_filename(), zap.max_size, zap.max_backups, zap.max_age
        )
    ]
    if zap.is_console_print:
        handlers.append(logging.StreamHandler(sys.stdout))

    logger = logging.getLogger(LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger