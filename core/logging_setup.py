"""
Logging Setup for Scanner System

Console output is colored by level; file output goes to two rotating
logs, everything in scanner_system.log and errors only in
scanner_errors.log. Every record is tagged with the package it came
from (communication, device, scanning, ...).

Author: Scanner System Development
Created: October 2026
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Dict, Optional, Union

FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(scanner_module)-13s | %(name)-24s | %(message)s'
CONSOLE_FORMAT = '%(asctime)s | %(levelname)-8s | %(scanner_module)-13s | %(message)s'

# file name -> minimum level (None: the configured level)
LOG_FILES: Dict[str, Optional[int]] = {
    'scanner_system.log': None,
    'scanner_errors.log': logging.ERROR,
}


class ColoredFormatter(logging.Formatter):
    """Colors the level name of console records"""

    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[1;31m',
    }
    RESET = '\033[0m'

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        # File handlers see the same record, so color a copy
        tinted = logging.makeLogRecord(record.__dict__)
        tinted.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(tinted)


class ScannerLogFilter(logging.Filter):
    """Adds the scanner package (communication, device, scanning...) to each record"""

    def filter(self, record):
        if not hasattr(record, 'scanner_module'):
            package = record.name.partition('.')[0]
            record.scanner_module = 'system' if package in ('root', '__main__') else package
        return True


def _rotating_handler(path: Path, level: int, max_file_size: int, backup_count: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=max_file_size,
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    handler.addFilter(ScannerLogFilter())
    return handler


def setup_logging(log_level: str = "INFO",
                  log_dir: Optional[Union[str, Path]] = None,
                  enable_console: bool = True,
                  enable_file: bool = True,
                  max_file_size: int = 10 * 1024 * 1024,
                  backup_count: int = 5) -> logging.Logger:
    """
    Replace the root logger's handlers with the scanner's console/file setup

    Args:
        log_level: Level name for the console and the main log file
        log_dir: Directory for the rotating logs (default ~/scanner_logs)
        enable_console: Log to stdout
        enable_file: Write scanner_system.log and scanner_errors.log
        max_file_size: Bytes before a log file rotates
        backup_count: Rotated files kept per log

    Returns:
        The root logger
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)

    if enable_console:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(level)
        console.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
        console.addFilter(ScannerLogFilter())
        root_logger.addHandler(console)

    if enable_file:
        log_dir = Path(log_dir) if log_dir is not None else Path.home() / "scanner_logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        for name, min_level in LOG_FILES.items():
            root_logger.addHandler(
                _rotating_handler(log_dir / name, min_level or level, max_file_size, backup_count)
            )

    logging.getLogger(__name__).debug(
        f"Logging initialized (level={log_level}, dir={log_dir if enable_file else None})"
    )
    return root_logger


def setup_simple_logging(level: str = "INFO") -> logging.Logger:
    """Console-only logging for runs without a log directory"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
        datefmt='%H:%M:%S'
    )
    return logging.getLogger()
