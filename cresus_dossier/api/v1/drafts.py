"""Step-by-step intake: /v1/drafts endpoints"""

import uuid
import logging
from dataclasses import asdict
from typing import Any, List

from fastapi import APIRouter, Body, Depends, File, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from cresus_dossier.api.v1.dossiers import read_uploads, run_submission
from cresus_dossier.api.v1.schemas import (
    DraftStateResponse,
    FieldLabelSchema,
    FormOptionsResponse,
    StepSchema,
    SubmissionResponse,
    TotalsSchema,
    section_value,
)
from cresus_dossier.api.dependencies import get_request_id, get_storage_client
from cresus_dossier.domain.documents import document_from_record, record_from_document
from cresus_dossier.domain.exceptions import ConsentRequiredError, InvalidStepError
from cresus_dossier.domain.fields import (
    AMOUNT_SECTIONS,
    CIVILITIES,
    DEBT_TITLES,
    EMPLOYMENT_STATUSES,
    FAMILY_STATUSES,
    HOUSING_STATUSES,
    empty_section,
)
from cresus_dossier.domain.models import DossierRecord
from cresus_dossier.domain.wizard import STEPS, TOTAL_STEPS, FormWizard
from cresus_dossier.infrastructure.clients.storage import StorageClient
from cresus_dossier.infrastructure.database.models import DossierDraft
from cresus_dossier.infrastructure.database.repositories import DraftRepository
from cresus_dossier.infrastructure.database.session import get_db

router = APIRouter()


def _form_content(record: DossierRecord) -> dict:
    document = document_from_record(record)
    document.pop("totals", None)
    document.pop("created_at", None)
    return document


def _load_draft(repo: DraftRepository, draft_id: str) -> DossierDraft:
    try:
        draft_uuid = uuid.UUID(draft_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid draft ID format")

    draft = repo.get_draft(draft_uuid)
    if not draft:
        raise HTTPException(status_code=404, detail="Draft not found")
    return draft


def _wizard(draft: DossierDraft) -> FormWizard:
    return FormWizard(record_from_document(draft.document), draft.step)


def _state(draft: DossierDraft, wizard: FormWizard) -> DraftStateResponse:
    return DraftStateResponse(
        draft_id=str(draft.id),
        step=wizard.step,
        step_title=wizard.current.title,
        total_steps=TOTAL_STEPS,
        can_advance=wizard.can_advance(),
        record=_form_content(wizard.record),
        section_totals=wizard.section_totals(),
        totals=TotalsSchema(**asdict(wizard.totals())),
    )


def _save(db: Session, repo: DraftRepository, draft: DossierDraft, wizard: FormWizard) -> DraftStateResponse:
    repo.save_draft(draft, wizard.step, _form_content(wizard.record))
    db.commit()
    return _state(draft, wizard)


@router.get("/form/options", response_model=FormOptionsResponse)
def form_options():
    """Steps, budget line labels and choice lists the intake form displays"""
    return FormOptionsResponse(
        steps=[StepSchema(title=s.title, sections=list(s.sections)) for s in STEPS],
        amount_sections={
            name: [FieldLabelSchema(key=key, label=label) for key, label in catalog]
            for name, catalog in AMOUNT_SECTIONS.items()
        },
        debt_sections=DEBT_TITLES,
        civilities=CIVILITIES,
        employment_statuses=EMPLOYMENT_STATUSES,
        family_statuses=FAMILY_STATUSES,
        housing_statuses=HOUSING_STATUSES,
    )


@router.post("/drafts", response_model=DraftStateResponse, status_code=201)
def create_draft(db: Session = Depends(get_db)):
    """Start an intake with the form defaults at the consent step"""
    repo = DraftRepository(db)
    record = DossierRecord(**{name: empty_section(catalog) for name, catalog in AMOUNT_SECTIONS.items()})
    wizard = FormWizard(record)
    draft = repo.create_draft(_form_content(wizard.record))
    db.commit()
    return _state(draft, wizard)


@router.get("/drafts/{draft_id}", response_model=DraftStateResponse)
def get_draft(draft_id: str, db: Session = Depends(get_db)):
    draft = _load_draft(DraftRepository(db), draft_id)
    return _state(draft, _wizard(draft))


@router.put("/drafts/{draft_id}/sections/{section}", response_model=DraftStateResponse)
def update_section(
    draft_id: str,
    section: str,
    payload: Any = Body(...),
    db: Session = Depends(get_db),
):
    """
    Replace one section of the form.

    Sections: consents, contact, income, housing, children, other,
    insurance, taxes, mortgage, consumer, other_debts. Amounts are euros
    and accept a decimal comma.
    """
    repo = DraftRepository(db)
    draft = _load_draft(repo, draft_id)
    wizard = _wizard(draft)

    try:
        wizard.update_section(section, section_value(section, payload))
    except InvalidStepError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))

    return _save(db, repo, draft, wizard)


@router.post("/drafts/{draft_id}/next", response_model=DraftStateResponse)
def next_step(draft_id: str, request: Request, db: Session = Depends(get_db)):
    repo = DraftRepository(db)
    draft = _load_draft(repo, draft_id)
    wizard = _wizard(draft)

    try:
        wizard.next()
    except ConsentRequiredError as e:
        logging.info(f"Draft blocked at consent step: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=409, detail=str(e))

    return _save(db, repo, draft, wizard)


@router.post("/drafts/{draft_id}/previous", response_model=DraftStateResponse)
def previous_step(draft_id: str, db: Session = Depends(get_db)):
    repo = DraftRepository(db)
    draft = _load_draft(repo, draft_id)
    wizard = _wizard(draft)
    wizard.previous()
    return _save(db, repo, draft, wizard)


@router.post("/drafts/{draft_id}/submit", response_model=SubmissionResponse, status_code=201)
async def submit_draft(
    draft_id: str,
    request: Request,
    files: List[UploadFile] = File(default=[]),
    db: Session = Depends(get_db),
    storage: StorageClient = Depends(get_storage_client),
):
    """Submit the draft content as a dossier, then discard the draft"""
    request_id = get_request_id(request)
    repo = DraftRepository(db)
    draft = _load_draft(repo, draft_id)

    uploads = await read_uploads(files)
    response = await run_submission(db, storage, record_from_document(draft.document), uploads, request_id)

    repo.delete_draft(draft)
    db.commit()
    return response
