"""Conversion between DossierRecord and the stored JSON document

Two layouts exist for charges and credits:

- nested: ``charges: {housing, children, other}`` and
  ``credits: {mortgage, consumer, other_debts}``
- flat: ``charges_housing``, ``charges_children``, ``charges_other``,
  ``credits_mortgage``, ``credits_consumer`` and ``other_debts``

Readers accept both, a flat key taking precedence over its nested
counterpart. Writers always produce the nested layout.
"""

from dataclasses import asdict, fields
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from cresus_dossier.domain.budget import compute_totals, stored_amount_cents
from cresus_dossier.domain.models import Attachment, Consents, Contact, Debt, DossierRecord

CHARGE_KEYS = {
    "housing": "charges_housing",
    "children": "charges_children",
    "other": "charges_other",
}

CREDIT_KEYS = {
    "mortgage": "credits_mortgage",
    "consumer": "credits_consumer",
    "other_debts": "other_debts",
}


def _pick(document: Mapping[str, Any], flat_key: str, group: str, nested_key: str, default: Any) -> Any:
    value = document.get(flat_key)
    if value is not None:
        return value
    nested = document.get(group) or {}
    value = nested.get(nested_key)
    return default if value is None else value


def charges_section(document: Mapping[str, Any], name: str) -> Dict[str, Any]:
    """Return one charges group ("housing", "children", "other") from either layout"""
    return dict(_pick(document, CHARGE_KEYS[name], "charges", name, {}))


def credits_section(document: Mapping[str, Any], name: str) -> List[Dict[str, Any]]:
    """Return one credits group ("mortgage", "consumer", "other_debts") from either layout"""
    return [dict(item) for item in _pick(document, CREDIT_KEYS[name], "credits", name, [])]


def _dataclass_from(cls, data: Optional[Mapping[str, Any]]):
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in (data or {}).items() if k in known and v is not None})


def _debt_from(data: Mapping[str, Any]) -> Debt:
    return Debt(
        creditor=str(data.get("creditor") or ""),
        monthly_payment=stored_amount_cents(data.get("monthly_payment")),
        remaining_principal=stored_amount_cents(data.get("remaining_principal")),
        arrears=stored_amount_cents(data.get("arrears")),
    )


def _amounts(section: Optional[Mapping[str, Any]]) -> Dict[str, int]:
    return {key: stored_amount_cents(value) for key, value in (section or {}).items()}


def record_from_document(document: Mapping[str, Any]) -> DossierRecord:
    """Rebuild a record from a stored document of either layout"""
    created_at = document.get("created_at")
    if isinstance(created_at, str):
        created_at = parse_timestamp(created_at)

    return DossierRecord(
        contact=_dataclass_from(Contact, document.get("contact")),
        consents=_dataclass_from(Consents, document.get("consents")),
        income=_amounts(document.get("income")),
        housing=_amounts(charges_section(document, "housing")),
        children=_amounts(charges_section(document, "children")),
        other=_amounts(charges_section(document, "other")),
        insurance=_amounts(document.get("insurance")),
        taxes=_amounts(document.get("taxes")),
        mortgage=[_debt_from(d) for d in credits_section(document, "mortgage")],
        consumer=[_debt_from(d) for d in credits_section(document, "consumer")],
        other_debts=[_debt_from(d) for d in credits_section(document, "other_debts")],
        files=[
            Attachment(name=f.get("name") or "", url=f.get("url") or "", path=f.get("path") or "")
            for f in document.get("files") or []
        ],
        created_at=created_at,
    )


def document_from_record(record: DossierRecord, created_at: Optional[datetime] = None) -> Dict[str, Any]:
    """Build the composite document written at submission time, totals included"""
    timestamp = created_at or record.created_at
    return {
        "created_at": timestamp.isoformat() if timestamp else None,
        "contact": asdict(record.contact),
        "consents": asdict(record.consents),
        "income": dict(record.income),
        "charges": {
            "housing": dict(record.housing),
            "children": dict(record.children),
            "other": dict(record.other),
        },
        "insurance": dict(record.insurance),
        "taxes": dict(record.taxes),
        "credits": {
            "mortgage": [asdict(d) for d in record.mortgage],
            "consumer": [asdict(d) for d in record.consumer],
            "other_debts": [asdict(d) for d in record.other_debts],
        },
        "files": [asdict(f) for f in record.files],
        "totals": asdict(compute_totals(record)),
    }


def parse_timestamp(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
