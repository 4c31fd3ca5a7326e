"""
Logging setup: console sink plus an optional debug session on disk.

Stdlib ``logging`` records from the rag subpackage are routed into loguru
so every module ends up in the same sinks.
"""
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink and route stdlib logging into it."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


class DebugLogger:
    """File-based debug session: a loguru log file and a JSONL event log."""

    def __init__(self, log_dir: str = "debug_logs", enabled: bool = True):
        """
        Args:
            log_dir: Directory for log files
            enabled: Enable/disable logging
        """
        self.enabled = enabled
        self.log_dir = Path(log_dir)
        self._handler_id = None
        self.session_log: Optional[Path] = None
        self.event_log: Optional[Path] = None

        if self.enabled:
            self.log_dir.mkdir(parents=True, exist_ok=True)

            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.session_log = self.log_dir / f"session_{timestamp}.log"
            self.event_log = self.log_dir / f"events_{timestamp}.jsonl"

            self._handler_id = logger.add(
                self.session_log,
                format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} | {message}",
                level="DEBUG",
                enqueue=True
            )

            logger.info(f"Debug logging session started: {timestamp}")

    def log_event(self, event: str, data: Dict[str, Any]) -> None:
        """Append a structured event (ingestion result, chat response, error)."""
        if not self.enabled:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "event": event,
            "data": data,
        }
        with open(self.event_log, 'a', encoding='utf-8') as f:
            f.write(json.dumps(entry, default=str) + '\n')

    def cleanup(self):
        """Remove the debug file handler."""
        if self._handler_id is not None:
            logger.remove(self._handler_id)
            self._handler_id = None
