"""One-page "DOSSIER CRÉSUS" template filled from a JSON snapshot"""

from io import BytesIO
from typing import Any, Mapping

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from cresus_dossier.config import settings
from cresus_dossier.domain.budget import stored_amount_cents
from cresus_dossier.domain.snapshot import MAX_CONSUMER_CREDITS, MAX_MORTGAGE_CREDITS
from cresus_dossier.infrastructure.observability.metrics import pdf_render_histogram
from cresus_dossier.utils.formatting import format_eur

MARGIN = 50
LINE = 16


class _Writer:
    """Top-down text cursor over a canvas, starting a new page when full"""

    def __init__(self, pdf: canvas.Canvas):
        self.pdf = pdf
        self.width, self.height = A4
        self.y = self.height - MARGIN

    def _advance(self, step: float) -> None:
        self.y -= step
        if self.y < MARGIN:
            self.pdf.showPage()
            self.y = self.height - MARGIN

    def title(self, text: str) -> None:
        self.pdf.setFont("Helvetica-Bold", 18)
        self.pdf.setFillColor(colors.HexColor("#1a365d"))
        self.pdf.drawCentredString(self.width / 2, self.y, text)
        self.pdf.setFillColor(colors.black)
        self._advance(LINE * 2)

    def heading(self, text: str) -> None:
        self._advance(LINE / 2)
        self.pdf.setFont("Helvetica-Bold", 14)
        self.pdf.drawString(MARGIN, self.y, text)
        self.pdf.line(MARGIN, self.y - 3, MARGIN + self.pdf.stringWidth(text, "Helvetica-Bold", 14), self.y - 3)
        self._advance(LINE * 1.4)

    def subheading(self, text: str) -> None:
        self.pdf.setFont("Helvetica-Bold", 12)
        self.pdf.drawString(MARGIN, self.y, text)
        self._advance(LINE)

    def text(self, text: str) -> None:
        self.pdf.setFont("Helvetica", 12)
        self.pdf.drawString(MARGIN, self.y, text.replace("\u202f", " "))
        self._advance(LINE)

    def footer(self, text: str) -> None:
        self._advance(LINE)
        self.pdf.setFont("Helvetica", 10)
        self.pdf.setFillColor(colors.gray)
        self.pdf.drawCentredString(self.width / 2, self.y, text)
        self.pdf.setFillColor(colors.black)


def _eur(value: Any) -> str:
    return format_eur(stored_amount_cents(value))


def render_snapshot_pdf(snapshot: Mapping[str, Any]) -> bytes:
    """
    Render the fixed template. Missing fields print as empty text or 0 €.

    Only the first 3 consumer credits and 2 mortgage credits fit the
    template; credits without a creditor name are skipped.
    """
    identity = snapshot.get("identity") or {}
    situation = snapshot.get("situation") or {}
    budget = snapshot.get("budget") or {}
    organisation = settings.organisation_name

    with pdf_render_histogram.labels(template="snapshot").time():
        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4)
        pdf.setTitle(f"Dossier {organisation}")
        out = _Writer(pdf)

        out.title(f"DOSSIER {organisation}")

        out.heading("1. Identité et coordonnées")
        out.text(f"Nom : {identity.get('last_name') or ''}")
        out.text(f"Prénom : {identity.get('first_name') or ''}")
        out.text(f"Civilité : {identity.get('civility') or ''}")
        out.text(f"Date de naissance : {identity.get('birth_date') or ''}")
        out.text(f"Téléphone : {identity.get('phone') or ''}")
        out.text(f"Email : {identity.get('email') or ''}")
        out.text(f"Adresse : {identity.get('address') or ''}")

        out.heading("2. Situation familiale et professionnelle")
        out.text(f"Profession : {situation.get('occupation') or ''}")
        out.text(f"Situation familiale : {situation.get('family_status') or ''}")

        out.heading("3. Budget mensuel")
        out.subheading("Revenus mensuels (€) :")
        out.text(f"Salaires : {_eur(budget.get('salaries'))}")
        out.text(f"Allocations : {_eur(budget.get('allowances'))}")
        out.text(f"Pensions : {_eur(budget.get('pensions'))}")
        out.text(f"Autres revenus : {_eur(budget.get('other_income'))}")

        out.subheading("Charges mensuelles (€) :")
        out.text(f"Loyer / Crédit immo : {_eur(budget.get('rent'))}")
        out.text(f"Énergie : {_eur(budget.get('energy'))}")
        out.text(f"Télécom : {_eur(budget.get('telecom'))}")
        out.text(f"Alimentation : {_eur(budget.get('food'))}")
        out.text(f"Santé : {_eur(budget.get('health'))}")
        out.text(f"Autres charges : {_eur(budget.get('other_charges'))}")

        out.subheading("Crédits à la consommation :")
        for credit in (budget.get("consumer_credits") or [])[:MAX_CONSUMER_CREDITS]:
            if credit.get("creditor"):
                out.text(
                    f"• {credit['creditor']} — {_eur(credit.get('monthly_payment'))}/mois"
                    f" — CRD : {_eur(credit.get('remaining_principal'))}"
                )

        out.subheading("Crédits immobiliers :")
        for credit in (budget.get("mortgage_credits") or [])[:MAX_MORTGAGE_CREDITS]:
            if credit.get("creditor"):
                out.text(
                    f"• {credit['creditor']} — {_eur(credit.get('monthly_payment'))}/mois"
                    f" — CRD : {_eur(credit.get('remaining_principal'))}"
                )

        out.footer(f"Document généré automatiquement — {organisation}")

        pdf.save()
        return buffer.getvalue()
