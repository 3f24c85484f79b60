"""Condensed budget snapshot printed by the fixed one-page PDF template"""

from typing import Any, Dict

from cresus_dossier.domain.budget import compute_totals
from cresus_dossier.domain.models import Debt, DossierRecord

# The template prints at most this many credit lines per group
MAX_CONSUMER_CREDITS = 3
MAX_MORTGAGE_CREDITS = 2


def _credit(debt: Debt) -> Dict[str, Any]:
    return {
        "creditor": debt.creditor,
        "monthly_payment": debt.monthly_payment,
        "remaining_principal": debt.remaining_principal,
    }


def snapshot_from_record(record: DossierRecord) -> Dict[str, Any]:
    """
    Fold a full dossier into the fixed template's categories.

    Categories the template has no line for are merged into the closest
    one, so income and charge totals of the snapshot match the dossier.
    """
    income = record.income
    housing = record.housing
    totals = compute_totals(record)

    rent = housing.get("rent", 0) + housing.get("rental_charges", 0)
    energy = housing.get("energy", 0) + housing.get("fuel_wood", 0) + housing.get("water", 0)
    telecom = housing.get("telecom", 0)
    health = record.insurance.get("health", 0)
    salaries = income.get("salaries", 0)
    allowances = income.get("allowances", 0)
    pensions = income.get("benefits", 0) + income.get("alimony_received", 0)

    return {
        "identity": {
            "last_name": record.contact.last_name,
            "first_name": record.contact.first_name,
            "civility": record.contact.civility,
            "birth_date": record.contact.birth_date,
            "phone": record.contact.mobile or record.contact.phone,
            "email": record.contact.email,
            "address": " ".join(
                part for part in (record.contact.address, record.contact.postal_code, record.contact.city) if part
            ),
        },
        "situation": {
            "occupation": record.contact.occupation,
            "family_status": record.contact.family_status,
        },
        "budget": {
            "salaries": salaries,
            "allowances": allowances,
            "pensions": pensions,
            "other_income": totals.total_income_cents - (salaries + allowances + pensions),
            "rent": rent,
            "energy": energy,
            "telecom": telecom,
            "food": 0,
            "health": health,
            "other_charges": totals.total_expenses_cents - (rent + energy + telecom + health),
            "consumer_credits": [_credit(d) for d in record.consumer[:MAX_CONSUMER_CREDITS]],
            "mortgage_credits": [_credit(d) for d in record.mortgage[:MAX_MORTGAGE_CREDITS]],
        },
    }
