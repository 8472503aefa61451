"""Logging configuration and utilities."""

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER = 'species_predictor'


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'
    }

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors if enabled."""
        levelname = record.levelname

        if self.use_colors and levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"

        result = super().format(record)
        record.levelname = levelname
        return result


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_dir: Optional[str] = ".species_logs",
    console: bool = True,
    colors: bool = True,
    max_bytes: int = 10485760,  # 10MB
    backup_count: int = 5,
    quiet: bool = False
) -> logging.Logger:
    """
    Configure the root logger with a rotating file handler and a console handler.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Custom log file name
        log_dir: Directory for log files, None disables file logging
        console: Enable console output
        colors: Enable colored console output
        max_bytes: Maximum log file size before rotation
        backup_count: Number of backup files to keep
        quiet: Suppress all but error logs to console

    Returns:
        The package logger
    """
    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.DEBUG)

    log_path = None
    if log_dir is not None:
        log_dir_path = Path(log_dir)
        log_dir_path.mkdir(parents=True, exist_ok=True)
        if log_file is None:
            log_file = f"species_predictor_{datetime.now().strftime('%Y%m%d')}.log"
        log_path = log_dir_path / log_file

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        root_logger.addHandler(file_handler)

    if console:
        # Logs go to stderr so stdout carries only the prediction
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.ERROR if quiet else level)
        console_handler.setFormatter(ColoredFormatter('%(levelname)s - %(message)s', use_colors=colors))
        root_logger.addHandler(console_handler)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.debug(f"Logging initialized - Level: {log_level}, File: {log_path}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance under the package namespace."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def log_api_call(api_name: str, endpoint: str, params: Dict[str, Any], response_time: float, success: bool):
    """Log API call details."""
    logger = get_logger('api')

    if success:
        logger.debug(
            f"API call: {api_name} - {endpoint} "
            f"(params: {params}, response_time: {response_time:.2f}s)"
        )
    else:
        logger.error(
            f"API call failed: {api_name} - {endpoint} "
            f"(params: {params}, response_time: {response_time:.2f}s)"
        )


class LogTimer:
    """Context manager for timing pipeline stages."""

    def __init__(self, operation: str, logger: Optional[logging.Logger] = None):
        self.operation = operation
        self.logger = logger or get_logger('performance')
        self.start_time = None
        self.elapsed = 0.0

    def __enter__(self):
        self.start_time = datetime.now()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time:
            self.elapsed = (datetime.now() - self.start_time).total_seconds()
            if exc_type is None:
                self.logger.info(f"{self.operation} completed in {self.elapsed:.2f}s")
            else:
                self.logger.error(f"{self.operation} failed after {self.elapsed:.2f}s")
