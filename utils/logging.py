"""
Logging configuration for the Exam Extractor
"""
import logging
import logging.handlers
import sys
import os
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, Optional
from config import settings


# Attributes every LogRecord carries; anything else was passed via ``extra``
_RESERVED_ATTRIBUTES = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName', 'taskName',
    'processName', 'process', 'getMessage', 'exc_info', 'exc_text', 'stack_info',
    'message', 'asctime'
}


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter that outputs structured JSON logs for better parsing
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON"""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        # Add exception information if present
        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info)
            }

        extra_fields = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRIBUTES
        }

        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, default=str)


class ContextFilter(logging.Filter):
    """
    Filter that adds contextual information to log records
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context information to log record"""
        record.service = "exam-extractor"
        record.version = settings.app_version
        record.pid = os.getpid()

        return True


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> logging.Logger:
    """
    Configure application logging

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format type ("structured" for JSON, "simple" for text)
        log_file: Optional file path for file logging
        max_file_size: Maximum size of log files before rotation
        backup_count: Number of backup files to keep

    Returns:
        Configured root logger
    """
    if log_level is None:
        log_level = settings.log_level
    if log_format is None:
        log_format = settings.log_format

    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if log_format == "structured":
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(service)s - %(name)s - %(levelname)s - %(message)s'
        )

    context_filter = ContextFilter()

    # Console handler on stderr; stdout carries the run summary
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context_filter)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(context_filter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

    configure_service_loggers(level)

    root_logger.debug(
        "Logging configured",
        extra={
            "log_level": log_level,
            "log_format": log_format,
            "log_file": log_file,
            "handlers": len(root_logger.handlers)
        }
    )

    return root_logger


def configure_service_loggers(level: int):
    """Configure logging for pipeline services and libraries"""

    # python-docx is chatty about unknown parts at DEBUG
    logging.getLogger("docx").setLevel(logging.WARNING)

    service_loggers = [
        "services.docx_reader",
        "services.document_normalizer",
        "services.line_classifier",
        "services.record_builder",
        "services.tabular_serializer",
        "services.exam_batch_service",
        "services.exam_analyzer",
    ]

    for logger_name in service_loggers:
        logging.getLogger(logger_name).setLevel(level)


def get_performance_logger() -> logging.Logger:
    """Get a dedicated logger for performance metrics"""
    perf_logger = logging.getLogger("performance")

    if not perf_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            '%(asctime)s - PERFORMANCE - %(message)s'
        )
        handler.setFormatter(formatter)
        perf_logger.addHandler(handler)
        perf_logger.setLevel(logging.INFO)
        perf_logger.propagate = False

    return perf_logger


def log_processing_step(step_name: str, details: Optional[Dict[str, Any]] = None):
    """
    Log a processing step with optional details

    Args:
        step_name: Name of the processing step
        details: Optional dictionary with step details
    """
    log_message = f"Processing step: {step_name}"
    if details:
        log_message += f" - {details}"

    logging.getLogger("pipeline").info(log_message)


def log_performance_metric(operation: str, duration_ms: int, details: Optional[Dict[str, Any]] = None):
    """
    Log performance metrics for operations

    Args:
        operation: Name of the operation
        duration_ms: Duration in milliseconds
        details: Optional dictionary with additional details
    """
    log_message = f"Performance: {operation} completed in {duration_ms}ms"
    if details:
        log_message += f" - {details}"

    get_performance_logger().info(log_message)
