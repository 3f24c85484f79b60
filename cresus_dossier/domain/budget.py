"""Monthly budget arithmetic - income, expenses, credit payments and residual"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Dict, Iterable, Mapping, Optional

from cresus_dossier.domain.fields import EXPENSE_SECTIONS
from cresus_dossier.domain.models import BudgetTotals, DossierRecord

TOTAL_FIELDS = (
    "total_income_cents",
    "total_expenses_cents",
    "total_credits_cents",
    "residual_cents",
)

# Beyond a double-precision float, an amount counts as not finite
MAX_EXPONENT = 308


def parse_amount_cents(value: Any) -> int:
    """
    Convert a user-entered euro amount to integer cents.

    Empty or missing values count as zero, the first comma is read as the
    decimal separator and anything that is not a finite number is zero.

    Example:
        "12,5" → 1250
        "1 200" → 120000
        "abc" → 0
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, (int, float, Decimal)):
        text = str(value)
    else:
        text = str(value).strip()
        for space in (" ", "\u00a0", "\u202f"):
            text = text.replace(space, "")
        text = text.replace(",", ".", 1)

    if not text:
        return 0

    try:
        euros = Decimal(text)
    except InvalidOperation:
        return 0

    if not euros.is_finite() or euros.adjusted() > MAX_EXPONENT:
        return 0

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, euros.adjusted() + 4)
        return int((euros * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def stored_amount_cents(value: Any) -> int:
    """Read an amount from a stored document: integers are cents, anything else is legacy euro text"""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return parse_amount_cents(value)


def section_total(amounts: Optional[Mapping[str, Any]]) -> int:
    """Sum of every amount of a budget section"""
    return sum(stored_amount_cents(v) for v in (amounts or {}).values())


def _payment(debt: Any) -> int:
    if isinstance(debt, Mapping):
        return stored_amount_cents(debt.get("monthly_payment"))
    return stored_amount_cents(getattr(debt, "monthly_payment", 0))


def credit_payments_total(mortgage: Iterable[Any], consumer: Iterable[Any]) -> int:
    """
    Monthly payments of mortgage and consumer credits.

    Other debts (arrears, overdrafts, loans from relatives) are listed on the
    dossier but are not part of the monthly credit burden.
    """
    return sum(_payment(d) for d in list(mortgage or []) + list(consumer or []))


def totals_from_sections(
    income: Mapping[str, Any],
    expenses: Iterable[Mapping[str, Any]],
    mortgage: Iterable[Any],
    consumer: Iterable[Any],
) -> BudgetTotals:
    total_income = section_total(income)
    total_expenses = sum(section_total(s) for s in expenses)
    total_credits = credit_payments_total(mortgage, consumer)

    return BudgetTotals(
        total_income_cents=total_income,
        total_expenses_cents=total_expenses,
        total_credits_cents=total_credits,
        residual_cents=total_income - (total_expenses + total_credits),
    )


def compute_totals(record: DossierRecord) -> BudgetTotals:
    """Compute the budget summary of a dossier being filled in"""
    return totals_from_sections(
        record.income,
        [getattr(record, name) for name in EXPENSE_SECTIONS],
        record.mortgage,
        record.consumer,
    )


def resolve_totals(stored: Optional[Mapping[str, Any]], recomputed: BudgetTotals) -> BudgetTotals:
    """
    Prefer the totals saved at submission time, field by field.

    Any missing field falls back to the recomputed value. A missing residual
    is derived from the resolved income, expenses and credits.
    """
    stored = stored or {}
    values: Dict[str, int] = {}

    for name in TOTAL_FIELDS[:3]:
        raw = stored.get(name)
        values[name] = stored_amount_cents(raw) if raw is not None else getattr(recomputed, name)

    raw_residual = stored.get("residual_cents")
    if raw_residual is not None:
        residual = stored_amount_cents(raw_residual)
    else:
        residual = values["total_income_cents"] - (
            values["total_expenses_cents"] + values["total_credits_cents"]
        )

    return BudgetTotals(residual_cents=residual, **values)
