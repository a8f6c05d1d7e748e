"""
Logging configuration for CareQueue backend.
"""

import logging
import sys
from typing import Any, Dict, Optional
import structlog
from structlog.stdlib import LoggerFactory
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from carequeue.core.config import settings


def configure_logging():
    """Configure application logging."""

    # Configure structlog
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
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard logging
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO if not settings.debug else logging.DEBUG,
        stream=sys.stdout
    )

    # Set specific loggers
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.debug else logging.WARNING
    )
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)

    # Configure Sentry if DSN is provided
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            integrations=[
                FastApiIntegration(),
                SqlalchemyIntegration(),
            ],
            traces_sample_rate=0.1 if settings.is_production else 1.0,
            environment=settings.app_env,
            release=settings.app_version,
        )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class AuditLogger:
    """Audit trail for queue mutations."""

    def __init__(self):
        self.logger = get_logger("audit")

    def log_status_change(
        self,
        appointment_id: str,
        old_status: Optional[str],
        new_status: str,
        applied: bool,
        details: Dict[str, Any] = None
    ):
        """Log a status transition request that passed validation."""
        self.logger.info(
            "Queue status change",
            appointment_id=appointment_id,
            old_status=old_status,
            new_status=new_status,
            applied=applied,
            details=details or {}
        )

    def log_walk_in(
        self,
        appointment_id: str,
        patient_id: str,
        doctor_id: int,
        priority: str,
        details: Dict[str, Any] = None
    ):
        """Log a walk-in admission."""
        self.logger.info(
            "Walk-in admitted",
            appointment_id=appointment_id,
            patient_id=patient_id,
            doctor_id=doctor_id,
            priority=priority,
            details=details or {}
        )

    def log_rejected(
        self,
        action: str,
        reason: str,
        details: Dict[str, Any] = None
    ):
        """Log a rejected queue command."""
        self.logger.warning(
            "Queue command rejected",
            action=action,
            reason=reason,
            details=details or {}
        )


# Global audit logger
audit_logger = AuditLogger()


class RequestLogger:
    """Request logging middleware."""

    def __init__(self):
        self.logger = get_logger("requests")

    async def log_request(self, request, response, process_time: float):
        """Log HTTP request details."""
        self.logger.info(
            "HTTP request",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            process_time=process_time,
            user_agent=request.headers.get("user-agent"),
            ip_address=request.client.host if request.client else None
        )


# Global request logger
request_logger = RequestLogger()
