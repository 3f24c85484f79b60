"""Advisor dashboard: /v1/advisor endpoints (bearer token required)"""

import re
import uuid
import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from cresus_dossier.api.v1.schemas import (
    AttachmentSchema,
    BudgetLineSchema,
    BudgetSectionSchema,
    DebtGroupSchema,
    DeletionResponse,
    DossierDetailResponse,
    DossierListResponse,
    DossierSummary,
    SnapshotSchema,
    TotalsSchema,
)
from cresus_dossier.api.dependencies import get_current_advisor, get_request_id, get_storage_client
from cresus_dossier.domain.budget import compute_totals, resolve_totals
from cresus_dossier.domain.documents import record_from_document
from cresus_dossier.domain.report import DossierView, build_dossier_view
from cresus_dossier.domain.search import filter_by_name
from cresus_dossier.domain.snapshot import snapshot_from_record
from cresus_dossier.infrastructure.clients.storage import StorageClient
from cresus_dossier.infrastructure.database.models import DossierDocument
from cresus_dossier.infrastructure.database.repositories import DossierRepository
from cresus_dossier.infrastructure.database.session import get_db
from cresus_dossier.infrastructure.observability.logging import log_deletion
from cresus_dossier.infrastructure.observability.metrics import deletion_counter
from cresus_dossier.infrastructure.pdf.dossier_report import render_dossier_report
from cresus_dossier.infrastructure.pdf.snapshot import render_snapshot_pdf
from cresus_dossier.services.archive import build_archive
from cresus_dossier.services.attachments import remove_attachments
from cresus_dossier.utils.date_utils import format_french_date
from cresus_dossier.utils.formatting import format_eur

router = APIRouter(prefix="/advisor", dependencies=[Depends(get_current_advisor)])


def _load_dossier(repo: DossierRepository, dossier_id: str) -> DossierDocument:
    try:
        dossier_uuid = uuid.UUID(dossier_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid dossier ID format")

    dossier = repo.get_dossier(dossier_uuid)
    if not dossier:
        raise HTTPException(status_code=404, detail="Dossier not found")
    return dossier


def _view(dossier: DossierDocument) -> DossierView:
    view = build_dossier_view(dossier.document)
    if view.created_at is None:
        view.created_at = dossier.created_at
    return view


def _attachment_response(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/dossiers", response_model=DossierListResponse)
def list_dossiers(
    search: str = Query("", description="Substring of the last name or first name"),
    db: Session = Depends(get_db),
):
    """
    List submitted dossiers, newest first.

    Returns:
        Summaries with the beneficiary name, submission date and residual
    """
    dossiers = filter_by_name(
        DossierRepository(db).list_dossiers(),
        search,
        contact_of=lambda d: d.document.get("contact"),
    )

    summaries = []
    for d in dossiers:
        record = record_from_document(d.document)
        created_at = record.created_at or d.created_at
        residual = resolve_totals(d.document.get("totals"), compute_totals(record)).residual_cents
        summaries.append(
            DossierSummary(
                dossier_id=str(d.id),
                last_name=record.contact.last_name,
                first_name=record.contact.first_name,
                created_at=created_at.isoformat() if created_at else None,
                created_at_label=format_french_date(created_at),
                residual_cents=residual,
                residual_label=format_eur(residual),
            )
        )

    return DossierListResponse(dossiers=summaries)


@router.get("/dossiers/{dossier_id}", response_model=DossierDetailResponse)
def get_dossier(dossier_id: str, db: Session = Depends(get_db)):
    """Full budget breakdown of one dossier"""
    dossier = _load_dossier(DossierRepository(db), dossier_id)
    view = _view(dossier)

    return DossierDetailResponse(
        dossier_id=str(dossier.id),
        display_name=view.display_name,
        created_at=view.created_at.isoformat() if view.created_at else None,
        created_at_label=format_french_date(view.created_at),
        contact=asdict(view.contact),
        consents=asdict(view.consents),
        sections=[
            BudgetSectionSchema(
                key=s.key,
                title=s.title,
                lines=[
                    BudgetLineSchema(
                        key=line.key,
                        label=line.label,
                        amount_cents=line.amount_cents,
                        amount_label=format_eur(line.amount_cents),
                    )
                    for line in s.lines
                ],
                total_cents=s.total_cents,
                total_label=format_eur(s.total_cents),
            )
            for s in view.sections
        ],
        debt_groups=[
            DebtGroupSchema(
                key=g.key,
                title=g.title,
                debts=[asdict(debt) for debt in g.debts],
                empty_message=g.empty_message,
            )
            for g in view.debt_groups
        ],
        attachments=[AttachmentSchema(name=f.name, url=f.url) for f in view.files],
        totals=TotalsSchema(**asdict(view.totals)),
        totals_recomputed=view.totals_recomputed,
    )


@router.delete("/dossiers/{dossier_id}", response_model=DeletionResponse)
async def delete_dossier(
    dossier_id: str,
    request: Request,
    db: Session = Depends(get_db),
    storage: StorageClient = Depends(get_storage_client),
    advisor: str = Depends(get_current_advisor),
):
    """
    Delete a dossier, then its attachments.

    The document goes first; attachments that cannot be removed are
    logged and reported but do not fail the request.
    """
    request_id = get_request_id(request)
    repo = DossierRepository(db)
    dossier = _load_dossier(repo, dossier_id)
    attachments = record_from_document(dossier.document).files

    try:
        repo.delete_dossier(dossier)
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    files_deleted, files_failed = await remove_attachments(storage, attachments)

    deletion_counter.inc()
    log_deletion(request_id, advisor, dossier_id, files_deleted, files_failed)

    return DeletionResponse(dossier_id=dossier_id, files_deleted=files_deleted, files_failed=files_failed)


@router.get("/dossiers/{dossier_id}/pdf")
def export_report(dossier_id: str, db: Session = Depends(get_db)):
    """Full dossier report as an A4 PDF"""
    dossier = _load_dossier(DossierRepository(db), dossier_id)
    content = render_dossier_report(_view(dossier))
    return _attachment_response(content, "application/pdf", f"dossier-{dossier.id}.pdf")


@router.get("/dossiers/{dossier_id}/snapshot", response_model=SnapshotSchema)
def get_snapshot(dossier_id: str, db: Session = Depends(get_db)):
    """Condensed snapshot accepted by POST /v1/advisor/pdf"""
    dossier = _load_dossier(DossierRepository(db), dossier_id)
    return SnapshotSchema.model_validate(snapshot_from_record(record_from_document(dossier.document)))


@router.get("/dossiers/{dossier_id}/archive")
async def export_archive(
    dossier_id: str,
    db: Session = Depends(get_db),
    storage: StorageClient = Depends(get_storage_client),
):
    """ZIP with dossier.json and the attachments still in storage"""
    dossier = _load_dossier(DossierRepository(db), dossier_id)
    content = await build_archive(storage, dossier.document)
    return _attachment_response(content, "application/zip", f"dossier-{dossier.id}.zip")


@router.post("/pdf")
def render_snapshot(snapshot: SnapshotSchema):
    """Fill the fixed one-page template from a snapshot"""
    content = render_snapshot_pdf(snapshot.model_dump())
    name = re.sub(r"[^A-Za-z0-9_-]", "", snapshot.identity.last_name) or "snapshot"
    return _attachment_response(content, "application/pdf", f"dossier-{name}.pdf")
