"""
Structured logging system for skillsync.

Provides centralized logging with console and file outputs, plus
metrics tracking for monitoring spreadsheet import quality.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for monitoring import runs.
    """

    def __init__(
        self,
        name: str = "skillsync",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()
        self.logger.propagate = False

        self.metrics = {
            "rows_processed": 0,
            "rows_inserted": 0,
            "rows_updated": 0,
            "rows_failed": 0,
            "labels_matched": 0,
            "labels_registered": 0,
            "failures_by_reason": {},
            "imports_by_type": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"skillsync_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, ensure_ascii=False, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_import(self, import_type: str, total: int, inserted: int, updated: int, failed: int):
        """Record the outcome of one import run."""
        stats = self.metrics["imports_by_type"].setdefault(
            import_type, {"runs": 0, "rows": 0, "failed": 0}
        )
        stats["runs"] += 1
        stats["rows"] += total
        stats["failed"] += failed

        self.metrics["rows_processed"] += total
        self.metrics["rows_inserted"] += inserted
        self.metrics["rows_updated"] += updated

    def record_row_failure(self, reason: str):
        """Record a rejected row, bucketed by reason."""
        self.metrics["rows_failed"] += 1
        bucket = reason.split(":", 1)[0]
        if bucket not in self.metrics["failures_by_reason"]:
            self.metrics["failures_by_reason"][bucket] = 0
        self.metrics["failures_by_reason"][bucket] += 1

    def record_label(self, matched: bool):
        """Record a label resolution: matched an existing label or registered a new one."""
        if matched:
            self.metrics["labels_matched"] += 1
        else:
            self.metrics["labels_registered"] += 1

    def get_metrics(self) -> dict:
        """Return current metrics with per-type failure rates."""
        metrics_copy = self.metrics.copy()
        for import_type, stats in metrics_copy["imports_by_type"].items():
            if stats["rows"] > 0:
                stats["failure_rate"] = round(stats["failed"] / stats["rows"], 3)

        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        processed = metrics["rows_processed"]
        failed = metrics["rows_failed"]
        ok_rate = 0
        if processed > 0:
            ok_rate = round((processed - failed) / processed * 100, 1)

        self.info("=== Import Session Metrics ===")
        self.info(f"Rows: {processed - failed}/{processed} ({ok_rate}% accepted)")
        self.info(f"Inserted: {metrics['rows_inserted']}, Updated: {metrics['rows_updated']}")
        self.info(
            f"Labels: {metrics['labels_matched']} matched, "
            f"{metrics['labels_registered']} registered"
        )

        if metrics["failures_by_reason"]:
            self.info("Failure Reasons:")
            for reason, count in metrics["failures_by_reason"].items():
                self.info(f"  {reason}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "skillsync",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
