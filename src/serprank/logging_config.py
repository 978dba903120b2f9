"""Logging setup: brief console output plus a detailed per-session log file"""
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Session log files kept on disk (older ones are removed at startup)
KEEP_SESSIONS = 5

CONSOLE_FORMAT = '%(levelname)s: %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s'

NOISY_LOGGERS = ("uvicorn.access", "urllib3", "httpx", "httpcore", "google_genai")


def _prune_session_logs(log_dir: Path, stem: str, keep: int) -> None:
    """Delete the oldest session logs so that keep - 1 remain before the new one."""
    existing = sorted(log_dir.glob(f"{stem}_*.log"), reverse=True)
    for old_log in existing[keep - 1:]:
        try:
            old_log.unlink()
        except OSError:
            pass  # another process may hold or have removed it


def setup_logging(
    log_file: str = "logs/serprank.log",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG
) -> Path:
    """
    Configure root logging.

    - Console (stdout): level + message, console_level
    - File: timestamp, logger and line, file_level; one file per session
      named {stem}_{YYYYmmdd_HHMMSS}.log, rotated at 10MB

    Args:
        log_file: Base log path; the session timestamp is appended to its stem
        console_level: Console threshold (INFO = brief)
        file_level: File threshold (DEBUG = ranking traces included)

    Returns:
        Path of this session's log file
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    _prune_session_logs(log_path.parent, log_path.stem, KEEP_SESSIONS)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    session_log = log_path.parent / f"{log_path.stem}_{timestamp}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers do the filtering
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    file_handler = RotatingFileHandler(
        session_log,
        mode='a',
        maxBytes=10*1024*1024,  # 10MB
        backupCount=10,
        encoding='utf-8'
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(
        f"Logging configured: console={logging.getLevelName(console_level)}, "
        f"file={session_log} ({logging.getLevelName(file_level)})"
    )
    return session_log
