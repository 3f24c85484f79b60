"""Domain models - pure Python dataclasses representing a beneficiary dossier"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional


@dataclass
class Contact:
    """Beneficiary and household identity"""

    civility: str = "Monsieur"
    last_name: str = ""
    first_name: str = ""
    address: str = ""
    postal_code: str = ""
    city: str = ""
    birth_date: str = ""
    birth_place: str = ""
    nationality: str = ""
    phone: str = ""
    mobile: str = ""
    email: str = ""
    occupation: str = ""
    partner_name: str = ""
    partner_birth_date: str = ""
    partner_birth_place: str = ""
    partner_nationality: str = ""
    partner_occupation: str = ""
    children: str = ""
    housing_status: str = "Locataire"
    landlord: str = ""
    employment_status: str = "Employé(e)"
    family_status: str = "Célibataire"


@dataclass
class Consents:
    """GDPR and mediation authorizations"""

    data_processing: bool = False
    referrer_sharing: bool = False
    network_transfer: bool = False
    creditor_authorization: str = ""  # free text: creditors the advisor may contact


@dataclass
class Debt:
    """One credit or debt line, amounts in cents"""

    creditor: str = ""
    monthly_payment: int = 0
    remaining_principal: int = 0
    arrears: int = 0


@dataclass
class Attachment:
    """Supporting document stored in object storage"""

    name: str
    url: str
    path: str


@dataclass
class BudgetTotals:
    """Monthly budget summary in cents"""

    total_income_cents: int
    total_expenses_cents: int
    total_credits_cents: int
    residual_cents: int


@dataclass
class DossierRecord:
    """Everything the beneficiary fills in, before or after submission"""

    contact: Contact = field(default_factory=Contact)
    consents: Consents = field(default_factory=Consents)
    income: Dict[str, int] = field(default_factory=dict)
    housing: Dict[str, int] = field(default_factory=dict)
    children: Dict[str, int] = field(default_factory=dict)
    other: Dict[str, int] = field(default_factory=dict)
    insurance: Dict[str, int] = field(default_factory=dict)
    taxes: Dict[str, int] = field(default_factory=dict)
    mortgage: List[Debt] = field(default_factory=list)
    consumer: List[Debt] = field(default_factory=list)
    other_debts: List[Debt] = field(default_factory=list)
    files: List[Attachment] = field(default_factory=list)
    created_at: Optional[datetime] = None


@dataclass
class PendingUpload:
    """Attachment received from the beneficiary, not yet stored"""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class UploadReport:
    """Outcome of a best-effort attachment upload"""

    uploaded: List[Attachment] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)
