"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from cresus_dossier.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # httpx logs every request URL at INFO, attachment download tokens included
    logging.getLogger("httpx").setLevel(logging.WARNING)


def log_submission(
    request_id: str,
    dossier_id: str,
    uploaded: int,
    failed: int,
    rejected: int,
    residual_cents: int,
    duration_ms: float,
) -> None:
    """Log structured submission outcome for follow-up"""
    logging.info(
        "Dossier submitted",
        extra={
            "request_id": request_id,
            "dossier_id": dossier_id,
            "step": "submission_complete",
            "attachments_uploaded": uploaded,
            "attachments_failed": failed,
            "attachments_rejected": rejected,
            "residual_cents": residual_cents,
            "duration_ms": duration_ms,
        },
    )


def log_deletion(request_id: str, advisor: str, dossier_id: str, files_deleted: int, files_failed: int) -> None:
    """Log who deleted a dossier; the deletion cannot be undone"""
    logging.info(
        "Dossier deleted",
        extra={
            "request_id": request_id,
            "advisor": advisor,
            "dossier_id": dossier_id,
            "step": "deletion_complete",
            "files_deleted": files_deleted,
            "files_failed": files_failed,
        },
    )
