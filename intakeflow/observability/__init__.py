"""Observability: structured logging with PII redaction.

Uses structlog for all log output. Call `setup_logging()` once at host
startup; modules obtain loggers through `get_logger(__name__)`.
"""

from intakeflow.observability.logging import PIIRedactor, get_logger, setup_logging

__all__ = ["PIIRedactor", "get_logger", "setup_logging"]
