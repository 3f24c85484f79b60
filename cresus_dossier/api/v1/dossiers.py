"""POST /v1/dossiers - Beneficiary dossier submission"""

import json
import time
import logging
from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from cresus_dossier.api.v1.schemas import (
    AttachmentSchema,
    DossierForm,
    SubmissionResponse,
    TotalsSchema,
    record_from_form,
)
from cresus_dossier.api.dependencies import get_request_id, get_storage_client
from cresus_dossier.domain.exceptions import ConsentRequiredError
from cresus_dossier.domain.models import DossierRecord, PendingUpload
from cresus_dossier.infrastructure.clients.storage import StorageClient
from cresus_dossier.infrastructure.database.session import get_db
from cresus_dossier.infrastructure.observability.logging import log_submission
from cresus_dossier.services.submission import submit_dossier

router = APIRouter()


async def read_uploads(files: List[UploadFile]) -> List[PendingUpload]:
    return [
        PendingUpload(
            filename=f.filename or "fichier",
            content=await f.read(),
            content_type=f.content_type or "application/octet-stream",
        )
        for f in files
    ]


async def run_submission(
    db: Session,
    storage: StorageClient,
    record: DossierRecord,
    uploads: List[PendingUpload],
    request_id: str,
) -> SubmissionResponse:
    """Submit a record and map domain failures to HTTP errors"""
    start_time = time.time()

    def on_progress(index: int, percent: int) -> None:
        logging.debug(
            "Attachment upload progress",
            extra={"request_id": request_id, "index": index, "percent": percent},
        )

    try:
        result = await submit_dossier(db, storage, record, uploads, on_progress=on_progress)

    except ConsentRequiredError as e:
        db.rollback()
        logging.warning(f"Submission refused: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    totals = result.document["totals"]
    duration_ms = (time.time() - start_time) * 1000
    log_submission(
        request_id,
        str(result.dossier_id),
        uploaded=len(result.report.uploaded),
        failed=len(result.report.failed),
        rejected=len(result.report.rejected),
        residual_cents=totals["residual_cents"],
        duration_ms=duration_ms,
    )

    return SubmissionResponse(
        dossier_id=str(result.dossier_id),
        totals=TotalsSchema(**totals),
        attachments=[AttachmentSchema(name=a.name, url=a.url) for a in result.report.uploaded],
        failed_attachments=result.report.failed,
        rejected_attachments=result.report.rejected,
    )


@router.post("/dossiers", response_model=SubmissionResponse, status_code=201)
async def create_dossier(
    request: Request,
    meta: str = Form(..., description="DossierForm as JSON"),
    files: List[UploadFile] = File(default=[]),
    db: Session = Depends(get_db),
    storage: StorageClient = Depends(get_storage_client),
):
    """
    Submit a complete intake with its supporting documents.

    Flow:
    1. Validate the form sent in the ``meta`` part
    2. Upload attachments (oversized ones rejected, failures tolerated)
    3. Persist the composite document with its totals
    """
    request_id = get_request_id(request)

    try:
        form = DossierForm.model_validate(json.loads(meta))
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=422, detail=f"meta is not valid JSON: {e.msg}")
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))

    uploads = await read_uploads(files)
    return await run_submission(db, storage, record_from_form(form), uploads, request_id)
