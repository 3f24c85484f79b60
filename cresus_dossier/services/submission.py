"""Dossier submission: attachments first, then one composite document"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cresus_dossier.domain.documents import document_from_record
from cresus_dossier.domain.exceptions import ConsentRequiredError
from cresus_dossier.domain.models import DossierRecord, PendingUpload, UploadReport
from cresus_dossier.infrastructure.clients.storage import StorageClient
from cresus_dossier.infrastructure.database.repositories import DossierRepository
from cresus_dossier.infrastructure.observability.metrics import record_submission, submission_counter
from cresus_dossier.services.attachments import UploadProgress, remove_attachments, upload_attachments
from cresus_dossier.utils.date_utils import utc_now


@dataclass
class SubmissionResult:
    dossier_id: uuid.UUID
    document: Dict[str, Any]
    report: UploadReport


async def submit_dossier(
    db: Session,
    storage: StorageClient,
    record: DossierRecord,
    uploads: Optional[List[PendingUpload]] = None,
    on_progress: Optional[UploadProgress] = None,
) -> SubmissionResult:
    """
    Store a completed dossier.

    Attachments are uploaded before the document is written so the
    document can reference them. When the database write fails the
    uploaded objects are removed and the error propagates.

    Raises:
        ConsentRequiredError: Data processing consent was not given
        SQLAlchemyError: The document could not be written
    """
    if not record.consents.data_processing:
        submission_counter.labels(outcome="refused").inc()
        raise ConsentRequiredError("Data processing consent is required to submit a dossier")

    report = await upload_attachments(storage, uploads or [], on_progress=on_progress)
    record.files = list(record.files) + report.uploaded

    created_at = utc_now()
    document = document_from_record(record, created_at=created_at)

    try:
        dossier = DossierRepository(db).create_dossier(document, created_at=created_at)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        submission_counter.labels(outcome="failed").inc()
        deleted, failed = await remove_attachments(storage, report.uploaded)
        logging.error(
            "Dossier write failed, uploaded attachments discarded",
            extra={"files_deleted": deleted, "files_failed": failed},
        )
        raise

    record_submission(document["totals"]["residual_cents"])
    return SubmissionResult(dossier_id=dossier.id, document=document, report=report)
