"""Advisor-facing breakdown of a stored dossier"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Mapping, Optional

from cresus_dossier.domain.budget import TOTAL_FIELDS, compute_totals, resolve_totals, section_total, stored_amount_cents
from cresus_dossier.domain.documents import charges_section, record_from_document
from cresus_dossier.domain.fields import (
    CHILDREN_FIELDS,
    DEBT_SECTIONS,
    DEBT_TITLES,
    HOUSING_FIELDS,
    INCOME_FIELDS,
    INSURANCE_FIELDS,
    OTHER_FIELDS,
    TAX_FIELDS,
    FieldCatalog,
    label_for,
)
from cresus_dossier.domain.models import Attachment, BudgetTotals, Consents, Contact, Debt


@dataclass
class BudgetLine:
    key: str
    label: str
    amount_cents: int


@dataclass
class BudgetSection:
    key: str
    title: str
    lines: List[BudgetLine]
    total_cents: int


@dataclass
class DebtGroup:
    key: str
    title: str
    debts: List[Debt]
    empty_message: str


@dataclass
class DossierView:
    contact: Contact
    consents: Consents
    sections: List[BudgetSection]
    debt_groups: List[DebtGroup]
    files: List[Attachment]
    totals: BudgetTotals
    created_at: Optional[datetime] = None
    totals_recomputed: bool = False

    @property
    def display_name(self) -> str:
        return f"{self.contact.first_name} {self.contact.last_name}".strip()


# (key, title, catalog) in report order
REPORT_SECTIONS = [
    ("income", "2. Revenus mensuels (moyenne 3 mois)", INCOME_FIELDS),
    ("housing", "3.1 Logement / Maison", HOUSING_FIELDS),
    ("children", "3.2 Charges liées aux enfants", CHILDREN_FIELDS),
    ("other", "3.3 Autres charges", OTHER_FIELDS),
    ("insurance", "4.1 Assurances", INSURANCE_FIELDS),
    ("taxes", "4.2 Impôts et taxes", TAX_FIELDS),
]

EMPTY_DEBT_MESSAGES = {
    "mortgage": "Aucun crédit immobilier déclaré.",
    "consumer": "Aucun crédit conso déclaré.",
    "other_debts": "Aucune autre dette déclarée.",
}


def _raw_section(document: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    if key in ("housing", "children", "other"):
        return charges_section(document, key)
    return document.get(key) or {}


def _section(document: Mapping[str, Any], key: str, title: str, catalog: FieldCatalog) -> BudgetSection:
    raw = _raw_section(document, key)
    lines = [
        BudgetLine(key=k, label=label_for(catalog, k), amount_cents=stored_amount_cents(v))
        for k, v in raw.items()
    ]
    return BudgetSection(key=key, title=title, lines=lines, total_cents=section_total(raw))


def build_dossier_view(document: Mapping[str, Any]) -> DossierView:
    """
    Normalize a stored document for display and export.

    Lines keep the stored order and unknown keys keep their raw name as
    label. Totals saved at submission are reused; missing ones are
    recomputed from the lines.
    """
    record = record_from_document(document)
    stored_totals = document.get("totals") or {}
    totals = resolve_totals(stored_totals, compute_totals(record))
    totals_recomputed = any(stored_totals.get(name) is None for name in TOTAL_FIELDS)

    return DossierView(
        contact=record.contact,
        consents=record.consents,
        sections=[_section(document, key, title, catalog) for key, title, catalog in REPORT_SECTIONS],
        debt_groups=[
            DebtGroup(
                key=key,
                title=DEBT_TITLES[key],
                debts=getattr(record, key),
                empty_message=EMPTY_DEBT_MESSAGES[key],
            )
            for key in DEBT_SECTIONS
        ],
        files=record.files,
        totals=totals,
        created_at=record.created_at,
        totals_recomputed=totals_recomputed,
    )
