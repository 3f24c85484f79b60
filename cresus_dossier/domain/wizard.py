"""Step navigation and running totals of the beneficiary intake form"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from cresus_dossier.domain.budget import compute_totals, credit_payments_total, section_total
from cresus_dossier.domain.exceptions import ConsentRequiredError, InvalidStepError
from cresus_dossier.domain.fields import AMOUNT_SECTIONS
from cresus_dossier.domain.models import BudgetTotals, DossierRecord


@dataclass(frozen=True)
class Step:
    title: str
    sections: Tuple[str, ...]


STEPS: List[Step] = [
    Step("Consentements RGPD & Médiation", ("consents",)),
    Step("Fiche contact", ("contact",)),
    Step("Revenus mensuels", ("income",)),
    Step("Charges mensuelles — Maison", ("housing",)),
    Step("Charges — Enfants / Autres charges", ("children", "other")),
    Step("Assurances / Impôts & taxes", ("insurance", "taxes")),
    Step("Crédits & dettes", ("mortgage", "consumer", "other_debts")),
    Step("Justificatifs & récapitulatif", ()),
]

TOTAL_STEPS = len(STEPS)
LAST_STEP = TOTAL_STEPS - 1

SECTION_NAMES = tuple(name for step in STEPS for name in step.sections)


class FormWizard:
    """
    Holds the current step of an intake in progress.

    Navigation is clamped to the first and last step. Leaving the consent
    step requires the beneficiary to accept the processing of their data.
    """

    def __init__(self, record: DossierRecord, step: int = 0):
        if not 0 <= step <= LAST_STEP:
            raise InvalidStepError(f"Step {step} is outside 0..{LAST_STEP}")
        self.record = record
        self.step = step

    @property
    def current(self) -> Step:
        return STEPS[self.step]

    def can_advance(self) -> bool:
        if self.step >= LAST_STEP:
            return False
        if self.step == 0 and not self.record.consents.data_processing:
            return False
        return True

    def next(self) -> int:
        if self.step == 0 and not self.record.consents.data_processing:
            raise ConsentRequiredError("Data processing consent is required to continue")
        self.step = min(LAST_STEP, self.step + 1)
        return self.step

    def previous(self) -> int:
        self.step = max(0, self.step - 1)
        return self.step

    def update_section(self, name: str, value) -> None:
        if name not in SECTION_NAMES:
            raise InvalidStepError(f"Unknown section: {name}")
        setattr(self.record, name, value)

    def section_totals(self) -> Dict[str, int]:
        """Page-local totals shown under each block of the form"""
        totals = {name: section_total(getattr(self.record, name)) for name in AMOUNT_SECTIONS}
        totals["credits"] = credit_payments_total(self.record.mortgage, self.record.consumer)
        return totals

    def totals(self) -> BudgetTotals:
        return compute_totals(self.record)
