"""SQLAlchemy ORM models: dossiers are stored as JSON documents"""

import uuid
from sqlalchemy import Column, DateTime, Integer, JSON, Text, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class DossierDocument(Base):
    """Submitted beneficiary dossier"""

    __tablename__ = "dossier"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    document = Column(JSON, nullable=False)
    last_name = Column(Text, nullable=True, index=True)
    first_name = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class DossierDraft(Base):
    """Intake in progress, resumed step by step"""

    __tablename__ = "dossier_draft"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    step = Column(Integer, nullable=False, default=0)
    document = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
