"""Pydantic schemas for API request/response validation"""

from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter

from cresus_dossier.domain.budget import parse_amount_cents
from cresus_dossier.domain.exceptions import InvalidStepError
from cresus_dossier.domain.models import Consents, Contact, Debt, DossierRecord

# Euro amount as typed by the beneficiary ("12,5", 12.5, "") stored as cents
Amount = Annotated[int, BeforeValidator(parse_amount_cents)]


class ContactSchema(BaseModel):
    """Beneficiary identity, household and housing"""

    model_config = ConfigDict(extra="forbid")

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


class ConsentsSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    data_processing: bool = False
    referrer_sharing: bool = False
    network_transfer: bool = False
    creditor_authorization: str = ""


class IncomeSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    salaries: Amount = 0
    allowances: Amount = 0
    benefits: Amount = 0
    alimony_received: Amount = 0
    family_support: Amount = 0
    rental_income: Amount = 0
    other_income: Amount = 0


class HousingSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    rent: Amount = 0
    rental_charges: Amount = 0
    energy: Amount = 0
    fuel_wood: Amount = 0
    water: Amount = 0
    telecom: Amount = 0


class ChildrenSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    schooling: Amount = 0
    alimony_paid: Amount = 0
    children_other: Amount = 0


class OtherChargesSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    transport: Amount = 0
    subscriptions: Amount = 0
    miscellaneous: Amount = 0
    other: Amount = 0


class InsuranceSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    home: Amount = 0
    car: Amount = 0
    health: Amount = 0
    other_insurance: Amount = 0


class TaxesSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    income_tax: Amount = 0
    housing_tax: Amount = 0
    property_tax: Amount = 0
    waste_tax: Amount = 0
    sanitation: Amount = 0


class DebtSchema(BaseModel):
    """One credit or debt line"""

    model_config = ConfigDict(extra="forbid")

    creditor: str = ""
    monthly_payment: Amount = 0
    remaining_principal: Amount = 0
    arrears: Amount = 0


class DossierForm(BaseModel):
    """Complete intake, sent as the ``meta`` part of POST /v1/dossiers"""

    contact: ContactSchema = Field(default_factory=ContactSchema)
    consents: ConsentsSchema = Field(default_factory=ConsentsSchema)
    income: IncomeSchema = Field(default_factory=IncomeSchema)
    housing: HousingSchema = Field(default_factory=HousingSchema)
    children: ChildrenSchema = Field(default_factory=ChildrenSchema)
    other: OtherChargesSchema = Field(default_factory=OtherChargesSchema)
    insurance: InsuranceSchema = Field(default_factory=InsuranceSchema)
    taxes: TaxesSchema = Field(default_factory=TaxesSchema)
    mortgage: List[DebtSchema] = []
    consumer: List[DebtSchema] = []
    other_debts: List[DebtSchema] = []


SECTION_SCHEMAS = {
    "consents": TypeAdapter(ConsentsSchema),
    "contact": TypeAdapter(ContactSchema),
    "income": TypeAdapter(IncomeSchema),
    "housing": TypeAdapter(HousingSchema),
    "children": TypeAdapter(ChildrenSchema),
    "other": TypeAdapter(OtherChargesSchema),
    "insurance": TypeAdapter(InsuranceSchema),
    "taxes": TypeAdapter(TaxesSchema),
    "mortgage": TypeAdapter(List[DebtSchema]),
    "consumer": TypeAdapter(List[DebtSchema]),
    "other_debts": TypeAdapter(List[DebtSchema]),
}


def _domain_value(name: str, value: Any) -> Any:
    if name == "contact":
        return Contact(**value.model_dump())
    if name == "consents":
        return Consents(**value.model_dump())
    if isinstance(value, list):
        return [Debt(**item.model_dump()) for item in value]
    return value.model_dump()


def section_value(name: str, payload: Any) -> Any:
    """
    Validate one wizard section and convert it to its domain value.

    Raises:
        InvalidStepError: The section does not exist
        pydantic.ValidationError: The payload does not match the section
    """
    adapter = SECTION_SCHEMAS.get(name)
    if adapter is None:
        raise InvalidStepError(f"Unknown section: {name}")
    return _domain_value(name, adapter.validate_python(payload))


def record_from_form(form: DossierForm) -> DossierRecord:
    return DossierRecord(**{name: _domain_value(name, getattr(form, name)) for name in SECTION_SCHEMAS})


class TotalsSchema(BaseModel):
    total_income_cents: int
    total_expenses_cents: int
    total_credits_cents: int
    residual_cents: int


class AttachmentSchema(BaseModel):
    name: str
    url: str


class SubmissionResponse(BaseModel):
    """Response for POST /v1/dossiers and POST /v1/drafts/{draft_id}/submit"""

    dossier_id: str
    totals: TotalsSchema
    attachments: List[AttachmentSchema]
    failed_attachments: List[str] = []
    rejected_attachments: List[str] = []


class DraftStateResponse(BaseModel):
    """Current position and content of an intake in progress"""

    draft_id: str
    step: int
    step_title: str
    total_steps: int
    can_advance: bool
    record: Dict[str, Any]
    section_totals: Dict[str, int]
    totals: TotalsSchema


class StepSchema(BaseModel):
    title: str
    sections: List[str]


class FieldLabelSchema(BaseModel):
    key: str
    label: str


class FormOptionsResponse(BaseModel):
    """Response for GET /v1/form/options"""

    steps: List[StepSchema]
    amount_sections: Dict[str, List[FieldLabelSchema]]
    debt_sections: Dict[str, str]
    civilities: List[str]
    employment_statuses: List[str]
    family_statuses: List[str]
    housing_statuses: List[str]


class DossierSummary(BaseModel):
    """Single dossier in the advisor list"""

    dossier_id: str
    last_name: str
    first_name: str
    created_at: Optional[str] = None
    created_at_label: str
    residual_cents: int
    residual_label: str


class DossierListResponse(BaseModel):
    """Response for GET /v1/advisor/dossiers"""

    dossiers: List[DossierSummary]


class BudgetLineSchema(BaseModel):
    key: str
    label: str
    amount_cents: int
    amount_label: str


class BudgetSectionSchema(BaseModel):
    key: str
    title: str
    lines: List[BudgetLineSchema]
    total_cents: int
    total_label: str


class DebtGroupSchema(BaseModel):
    key: str
    title: str
    debts: List[Dict[str, Any]]
    empty_message: str


class DossierDetailResponse(BaseModel):
    """Response for GET /v1/advisor/dossiers/{dossier_id}"""

    dossier_id: str
    display_name: str
    created_at: Optional[str] = None
    created_at_label: str
    contact: Dict[str, Any]
    consents: Dict[str, Any]
    sections: List[BudgetSectionSchema]
    debt_groups: List[DebtGroupSchema]
    attachments: List[AttachmentSchema]
    totals: TotalsSchema
    totals_recomputed: bool


class DeletionResponse(BaseModel):
    dossier_id: str
    files_deleted: int
    files_failed: int


class LoginRequest(BaseModel):
    """Request body for POST /v1/auth/login"""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class SnapshotIdentity(BaseModel):
    last_name: str = ""
    first_name: str = ""
    civility: str = ""
    birth_date: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""


class SnapshotSituation(BaseModel):
    occupation: str = ""
    family_status: str = ""


class SnapshotCredit(BaseModel):
    creditor: str = ""
    monthly_payment: int = 0
    remaining_principal: int = 0


class SnapshotBudget(BaseModel):
    """Monthly budget of the fixed template, amounts in cents"""

    salaries: int = 0
    allowances: int = 0
    pensions: int = 0
    other_income: int = 0
    rent: int = 0
    energy: int = 0
    telecom: int = 0
    food: int = 0
    health: int = 0
    other_charges: int = 0
    consumer_credits: List[SnapshotCredit] = []
    mortgage_credits: List[SnapshotCredit] = []


class SnapshotSchema(BaseModel):
    """Request body for POST /v1/advisor/pdf"""

    identity: SnapshotIdentity = Field(default_factory=SnapshotIdentity)
    situation: SnapshotSituation = Field(default_factory=SnapshotSituation)
    budget: SnapshotBudget = Field(default_factory=SnapshotBudget)
