"""Structured logging configuration.

All logs go to stdout. Uses JSON format for structured logging in
production and a plain text format in development.

LOGGING CONVENTIONS:
- Modules get loggers via get_logger(__name__)
- Structured fields travel through ``extra=``, never string formatting
- Per-candidate link decisions at DEBUG, one summary per call at INFO
- Malformed markup recoveries at DEBUG (they are expected, not errors)
"""

import logging
import sys
from datetime import UTC, datetime
from typing import Any

from pythonjsonlogger import jsonlogger

from article_linker.core.config import get_settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[name-defined]
    """Custom JSON formatter with additional fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(UTC).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def setup_logging() -> None:
    """Configure application logging.

    Outputs to stdout only. Uses JSON format in production, text format
    in development.
    """
    settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper()))

    # Clear existing handlers
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    formatter: logging.Formatter
    if settings.log_format == "json":
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Set log levels for noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)


class LinkInjectionLogger:
    """Logger for link injection decisions."""

    def __init__(self) -> None:
        self.logger = get_logger("link_injection")

    def candidate_dropped(self, article_id: str, reason: str) -> None:
        """Log a related article that can never produce a link."""
        self.logger.debug(
            "Link candidate dropped",
            extra={"article_id": article_id, "reason": reason},
        )

    def budget_exhausted(self, article_id: str, existing: int, budget: int) -> None:
        """Log a candidate skipped before scanning because its budget is spent."""
        self.logger.debug(
            "Link budget exhausted, skipping candidate",
            extra={
                "article_id": article_id,
                "existing_links": existing,
                "budget": budget,
            },
        )

    def candidate_scanned(
        self, article_id: str, title: str, matches: int, linked: int
    ) -> None:
        """Log the outcome of scanning content for one candidate."""
        self.logger.debug(
            "Link candidate scanned",
            extra={
                "article_id": article_id,
                "title": title[:100],
                "eligible_matches": matches,
                "links_created": linked,
            },
        )

    def injection_complete(
        self,
        candidates: int,
        links_created: int,
        content_length: int,
        locale: str,
    ) -> None:
        """Log the summary of one injection call."""
        self.logger.info(
            "Internal links injected",
            extra={
                "candidates": candidates,
                "links_created": links_created,
                "content_length": content_length,
                "locale": locale,
            },
        )

    def links_stripped(self, links_removed: int, filtered: bool) -> None:
        """Log the summary of one strip call."""
        self.logger.info(
            "Internal links stripped",
            extra={"links_removed": links_removed, "filtered_by_id": filtered},
        )

    def markup_recovered(self, position: int, reason: str) -> None:
        """Log a malformed markup construct handled best-effort."""
        self.logger.debug(
            "Malformed markup recovered",
            extra={"position": position, "reason": reason},
        )


# Singleton link injection logger
link_logger = LinkInjectionLogger()
