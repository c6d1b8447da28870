# logging_setup.py

import logging
import sys
from pathlib import Path
from typing import Optional, Union

APP_LOGGERS = ("__main__", "main", "api", "auth_service", "task_service", "database", "errors")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - our own modules and uvicorn access/error logs pass through
    - passlib and sqlalchemy only when WARNING+
    - any other third-party logger only when ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        root = name.split(".", 1)[0]

        if root in APP_LOGGERS or root == "uvicorn":
            return True

        if root in ("passlib", "sqlalchemy", "py.warnings"):
            return record.levelno >= logging.WARNING

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """
    Configure the root logger with a filtered console handler and,
    when ``log_file`` is given, a file handler that receives everything.

    Call this once, before the app starts serving.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if log_file else level)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
