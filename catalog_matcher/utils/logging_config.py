"""Logging configuration for the application."""

import logging
import logging.handlers
import os
import sys
import time
from pathlib import Path
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..config import LOGS_DIR, LoggingSettings

# Initialize logger
logger = logging.getLogger(__name__)

LOG_FILE_NAME = "app.log"


def _cleanup_old_logs(log_dir: Path, base_name: str, max_files: int, logger: logging.Logger):
    """Clean up old log files when max number is reached.

    Args:
        log_dir: Directory containing log files
        base_name: Base name of the log file (e.g., 'app.log')
        max_files: Maximum number of log files to keep (including base file)
        logger: Logger instance for logging cleanup operations
    """
    log_files = sorted(
        [f for f in log_dir.glob(f"{base_name}.*") if f.is_file()],
        key=lambda x: x.stat().st_mtime,
        reverse=True,
    )

    if len(log_files) > max_files:
        files_to_delete = log_files[max_files:]
        for old_file in files_to_delete:
            try:
                logger.debug(f"Deleting old log file: {old_file}")
                old_file.unlink()
            except OSError as e:
                logger.error(f"Failed to delete old log file {old_file}: {e}")
        logger.info(f"Deleted {len(files_to_delete)} old log files")


def setup_logging(settings: LoggingSettings, log_dir: Optional[Path] = None):
    """Set up console and daily rotating file logging.

    Args:
        settings: Logging settings group
        log_dir: Where to write ``app.log``; defaults to the package logs directory
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all logs, handlers will filter

    # Remove existing handlers to prevent duplicates if logging was configured elsewhere
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(settings.log_level)
    console_handler.setFormatter(logging.Formatter(settings.format))
    root_logger.addHandler(console_handler)

    if settings.enable_file_logging:
        log_dir = log_dir or LOGS_DIR
        os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.handlers.TimedRotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            when="midnight",
            interval=1,  # Create new file every day
            backupCount=settings.backup_count,
            encoding="utf-8",
            delay=True,
        )
        file_handler.suffix = "%Y-%m-%d"  # Add date suffix to rotated files
        file_handler.setLevel(settings.file_log_level)
        file_handler.setFormatter(logging.Formatter(settings.file_format))
        root_logger.addHandler(file_handler)

        # +1 to account for the base log file
        _cleanup_old_logs(log_dir, LOG_FILE_NAME, settings.backup_count + 1, root_logger)

    # Set levels for noisy loggers
    for logger_name, level in settings.noisy_loggers.items():
        logging.getLogger(logger_name).setLevel(level)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging request timing and response status."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        endpoint_logger = logging.getLogger("endpoint")

        try:
            response = await call_next(request)
        except Exception as e:
            endpoint_logger.error(f"Request failed: {request.method} {request.url.path}: {str(e)}")
            raise

        duration_ms = (time.time() - start_time) * 1000
        endpoint_logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.2f}ms)")
        return response
