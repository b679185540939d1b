"""Structured logging setup for the job data quality engine."""

import logging
import logging.config
import structlog
from pathlib import Path
from typing import Dict, Any, Optional


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Setup structured logging configuration.

    The engine itself never calls this; hosting services and the test
    suite do, once, before building summaries.
    """
    handlers = [logging.StreamHandler()]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_processing_progress(phase: str, completed: int, total: int,
                          item_type: str = "jobs") -> Dict[str, Any]:
    """Create structured log data for processing progress."""
    percentage = (completed / total * 100) if total > 0 else 0

    return {
        "phase": phase,
        "completed": completed,
        "total": total,
        "percentage": round(percentage, 2),
        "item_type": item_type
    }
