"""
Structured Logging & Observability
Human-readable in development, machine-parseable in production.
"""
import sys
from loguru import logger
from typing import Any
from callplan.config import get_settings


def configure_logging():
    """
    Configure loguru for the dashboard process.

    In development: Human-readable colorized output
    In production: Structured JSON logs for ingestion
    """
    settings = get_settings()

    # Remove default handler
    logger.remove()

    if not settings.enable_structured_logging:
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "{message}"
            ),
            level=settings.log_level,
            colorize=True,
        )
    else:
        logger.add(
            sys.stderr,
            format="{message}",
            level=settings.log_level,
            serialize=True,  # Output as JSON
        )

    logger.info(f"Logging configured: level={settings.log_level}, structured={settings.enable_structured_logging}")


def log_service_call(
    operation: str,
    duration_ms: float,
    success: bool = True,
    error: str | None = None,
    **context: Any
):
    """
    Structured logging for calls to the backend service.

    Args:
        operation: Contract operation (e.g. "patch_outcome", "create_reminder")
        duration_ms: Round-trip time in milliseconds
        success: Whether the call succeeded
        error: Error message if failed
        **context: Extra fields (contact_id, status_code, ...)
    """
    log_data = {
        "event_type": "service_call",
        "operation": operation,
        "duration_ms": round(duration_ms, 2),
        "success": success,
        **context,
    }

    if error:
        log_data["error"] = error

    level = "DEBUG" if success else "WARNING"
    logger.bind(**log_data).log(level, f"Service call: {operation} | {'ok' if success else 'failed'}")


def log_business_event(
    event_type: str,
    contact_id: str | None,
    **details: Any
):
    """
    Log business-critical events for analytics.

    Examples:
        - Outcome logged
        - Contact re-logged
        - Follow-up reminder committed

    Args:
        event_type: Type of event (e.g., "outcome_logged", "follow_up_committed")
        contact_id: The contact involved (None for unlinked reminders)
        **details: Event-specific data
    """
    log_data = {
        "event_type": event_type,
        "contact_id": contact_id,
        **details
    }

    logger.bind(**log_data).success(f"Business Event: {event_type}")
