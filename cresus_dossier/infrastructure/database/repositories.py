"""Data access layer for dossiers and drafts"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from cresus_dossier.infrastructure.database.models import DossierDocument, DossierDraft


class DossierRepository:
    """Repository for submitted dossiers"""

    def __init__(self, db: Session):
        self.db = db

    def create_dossier(self, document: Dict[str, Any], created_at: Optional[datetime] = None) -> DossierDocument:
        """Persist a composite dossier document"""
        contact = document.get("contact") or {}
        db_dossier = DossierDocument(
            document=document,
            last_name=contact.get("last_name"),
            first_name=contact.get("first_name"),
        )
        if created_at is not None:
            db_dossier.created_at = created_at
        self.db.add(db_dossier)
        self.db.flush()  # Get ID without committing
        return db_dossier

    def list_dossiers(self) -> List[DossierDocument]:
        """Fetch every dossier, newest first"""
        return (
            self.db.query(DossierDocument)
            .order_by(DossierDocument.created_at.desc())
            .all()
        )

    def get_dossier(self, dossier_id: uuid.UUID) -> Optional[DossierDocument]:
        return (
            self.db.query(DossierDocument)
            .filter(DossierDocument.id == dossier_id)
            .first()
        )

    def delete_dossier(self, dossier: DossierDocument) -> None:
        self.db.delete(dossier)
        self.db.flush()


class DraftRepository:
    """Repository for intakes in progress"""

    def __init__(self, db: Session):
        self.db = db

    def create_draft(self, document: Dict[str, Any]) -> DossierDraft:
        db_draft = DossierDraft(step=0, document=document)
        self.db.add(db_draft)
        self.db.flush()
        return db_draft

    def get_draft(self, draft_id: uuid.UUID) -> Optional[DossierDraft]:
        return (
            self.db.query(DossierDraft)
            .filter(DossierDraft.id == draft_id)
            .first()
        )

    def save_draft(self, draft: DossierDraft, step: int, document: Dict[str, Any]) -> DossierDraft:
        """Store the wizard position and form content"""
        draft.step = step
        draft.document = document  # reassigned so the JSON column is flagged dirty
        self.db.flush()
        return draft

    def delete_draft(self, draft: DossierDraft) -> None:
        self.db.delete(draft)
        self.db.flush()
