"""Full dossier report rendered with reportlab platypus"""

from io import BytesIO
from typing import List, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from cresus_dossier.config import settings
from cresus_dossier.domain.models import Debt
from cresus_dossier.domain.report import DebtGroup, DossierView
from cresus_dossier.infrastructure.observability.metrics import pdf_render_histogram
from cresus_dossier.utils.date_utils import format_french_date
from cresus_dossier.utils.formatting import format_eur, format_yes_no

TABLE_STYLE = TableStyle(
    [
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#cccccc")),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
)

HEADER_STYLE = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#eeeeee")),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ]
)

TOTAL_STYLE = TableStyle([("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold")])


def plain_text(value) -> str:
    """Table cell text; the standard fonts lack the narrow no-break space"""
    return str(value if value is not None else "").replace("\u202f", " ")


def pdf_text(value) -> str:
    """Paragraph text, escaped for platypus markup"""
    return escape(plain_text(value))


def money(cents: int) -> str:
    return plain_text(format_eur(cents))


def _table(rows: List[List[str]], widths: Sequence[float], *styles: TableStyle) -> Table:
    table = Table(rows, colWidths=widths, hAlign="LEFT")
    table.setStyle(TABLE_STYLE)
    for style in styles:
        table.setStyle(style)
    return table


def _debt_rows(group: DebtGroup) -> List[List[str]]:
    first_column = "Créancier / Nature" if group.key == "other_debts" else "Établissement"
    rows = [[first_column, "Mensualité", "Capital restant dû", "Impayés"]]
    for debt in group.debts:
        rows.append(_debt_row(debt, optional_principal=group.key == "other_debts"))
    return rows


def _debt_row(debt: Debt, optional_principal: bool) -> List[str]:
    principal = "—" if optional_principal and not debt.remaining_principal else money(debt.remaining_principal)
    return [
        plain_text(debt.creditor or "—"),
        money(debt.monthly_payment),
        principal,
        money(debt.arrears) if debt.arrears else "—",
    ]


def render_dossier_report(view: DossierView) -> bytes:
    """Render every section of the advisor view into an A4 PDF"""
    with pdf_render_histogram.labels(template="report").time():
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=15 * mm,
            rightMargin=15 * mm,
            topMargin=15 * mm,
            bottomMargin=15 * mm,
            title=f"Dossier {view.display_name}",
        )
        styles = getSampleStyleSheet()
        h1, h2, h3, body = styles["Title"], styles["Heading2"], styles["Heading3"], styles["BodyText"]
        width = doc.width

        contact = view.contact
        story = [
            Paragraph(pdf_text(f"Espace conseiller {settings.organisation_name}"), h1),
            Paragraph(f"Dossier : <b>{pdf_text(view.display_name)}</b>", body),
            Paragraph(f"Envoyé le : {pdf_text(format_french_date(view.created_at))}", body),
            Spacer(1, 4 * mm),
            Paragraph("1. Identité du bénéficiaire", h2),
        ]

        identity = [
            ["Civilité", contact.civility],
            ["Nom", contact.last_name],
            ["Prénom", contact.first_name],
            ["Date de naissance", contact.birth_date or "—"],
            ["Lieu de naissance", contact.birth_place or "—"],
            ["Nationalité", contact.nationality or "—"],
            ["Téléphone", contact.mobile or contact.phone or "—"],
            ["Email", contact.email or "—"],
            ["Adresse", " ".join(p for p in (contact.address, contact.postal_code, contact.city) if p) or "—"],
            ["Situation familiale", contact.family_status or "—"],
            ["Situation professionnelle", contact.employment_status or "—"],
            ["Logement", contact.housing_status or "—"],
        ]
        if contact.housing_status == "Locataire" and contact.landlord:
            identity.append(["Bailleur", contact.landlord])
        story.append(
            _table(
                [[plain_text(k), Paragraph(pdf_text(v), body)] for k, v in identity],
                [0.35 * width, 0.65 * width],
                TableStyle([("ALIGN", (1, 0), (-1, -1), "LEFT")]),
            )
        )

        # sections opening a new chapter; the others are sub-sections
        chapters = {"housing": "3. Charges mensuelles détaillées", "insurance": "4. Assurances et impôts"}
        for section in view.sections:
            if section.key == "income":
                story.append(Paragraph(pdf_text(section.title), h2))
            else:
                if section.key in chapters:
                    story.append(Paragraph(pdf_text(chapters[section.key]), h2))
                story.append(Paragraph(pdf_text(section.title), h3))
            rows = [["Poste", "Montant"]]
            rows += [[Paragraph(pdf_text(line.label), body), money(line.amount_cents)] for line in section.lines]
            rows.append(["Total", money(section.total_cents)])
            story.append(_table(rows, [0.7 * width, 0.3 * width], HEADER_STYLE, TOTAL_STYLE))

        story.append(Paragraph("5. Crédits et autres dettes", h2))
        for number, group in enumerate(view.debt_groups, start=1):
            story.append(Paragraph(pdf_text(f"5.{number} {group.title}"), h3))
            if not group.debts:
                story.append(Paragraph(pdf_text(group.empty_message), body))
                continue
            story.append(_table(_debt_rows(group), [0.4 * width, 0.2 * width, 0.2 * width, 0.2 * width], HEADER_STYLE))

        totals = view.totals
        story.append(Paragraph("6. Synthèse budgétaire", h2))
        story.append(
            _table(
                [
                    ["Total revenus", money(totals.total_income_cents)],
                    ["Total charges (hors crédits)", money(totals.total_expenses_cents)],
                    ["Total mensualités crédits", money(totals.total_credits_cents)],
                    ["Reste pour vivre", money(totals.residual_cents)],
                ],
                [0.7 * width, 0.3 * width],
                TableStyle(
                    [
                        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                        (
                            "TEXTCOLOR",
                            (1, -1),
                            (1, -1),
                            colors.HexColor("#dc2626") if totals.residual_cents < 0 else colors.HexColor("#059669"),
                        ),
                    ]
                ),
            )
        )

        consents = view.consents
        story.append(Spacer(1, 3 * mm))
        story.append(Paragraph("<b>Consentements :</b>", body))
        story.append(Paragraph(f"Traitement des données : {format_yes_no(consents.data_processing)}", body))
        story.append(Paragraph(f"Partage avec prescripteur : {format_yes_no(consents.referrer_sharing)}", body))
        story.append(
            Paragraph(
                pdf_text(f"Transfert réseau {settings.organisation_name} : {format_yes_no(consents.network_transfer)}"),
                body,
            )
        )
        if consents.creditor_authorization:
            story.append(
                Paragraph(
                    "<b>Autorisation de communiquer aux créanciers :</b> "
                    + pdf_text(consents.creditor_authorization),
                    body,
                )
            )

        story.append(Paragraph("7. Pièces jointes", h2))
        if not view.files:
            story.append(Paragraph("Aucune pièce jointe téléversée.", body))
        for attachment in view.files:
            story.append(
                Paragraph(
                    f'• <link href="{pdf_text(attachment.url)}" color="blue">{pdf_text(attachment.name)}</link>',
                    body,
                )
            )

        doc.build(story)
        return buffer.getvalue()
