# Rev 0.1.0

# diyProjects – logging setup
from __future__ import annotations
import logging, os, sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .paths import APP_NAME, logs_dir

ROOT_LOGGER = APP_NAME
FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def _level(name: str | None, default: int) -> int:
    if not name:
        return default
    return getattr(logging, str(name).upper(), default)


def setup_logging(
    level_name: str | None = None,
    *,
    log_dir: Path | None = None,
    console_level_name: str | None = None,
) -> Path:
    """
    Wire the app logger to a rotating file and the console.
    The console stays at WARNING unless asked otherwise so it does not
    interleave with the menu prompts.
    """
    level_name = (level_name or os.environ.get("DIYPROJECTS_LOG_LEVEL") or "INFO").upper()
    level = _level(level_name, logging.INFO)

    log_dir = log_dir or logs_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = log_dir / f"{APP_NAME}.log"

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    # File: rotate at 5MB, keep 7 backups
    fh = RotatingFileHandler(logfile, maxBytes=5_000_000, backupCount=7, encoding="utf-8")
    fh.setFormatter(logging.Formatter(FORMAT, DATEFMT))
    fh.setLevel(level)
    logger.addHandler(fh)

    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(logging.Formatter(FORMAT, DATEFMT))
    ch.setLevel(_level(console_level_name, logging.WARNING))
    logger.addHandler(ch)

    # Uncaught exceptions → log as ERROR
    def _excepthook(exctype, value, tb):
        logger.getChild("unhandled").error("Uncaught exception", exc_info=(exctype, value, tb))
        sys.__excepthook__(exctype, value, tb)
    sys.excepthook = _excepthook

    logger.info("Logging initialized at %s; file: %s", level_name, logfile)
    return logfile
