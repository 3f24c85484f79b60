"""Money formatting for French-language reports"""

NARROW_NBSP = "\u202f"
NBSP = "\u00a0"


def format_eur(cents: int) -> str:
    """
    Format an amount in cents the way fr-FR displays euros.

    Example:
        123456 → "1 234,56 €" (narrow no-break space between thousands,
        no-break space before the sign)
    """
    sign = "-" if cents < 0 else ""
    euros, remainder = divmod(abs(int(cents)), 100)
    grouped = f"{euros:,}".replace(",", NARROW_NBSP)
    return f"{sign}{grouped},{remainder:02d}{NBSP}€"


def format_yes_no(value: bool) -> str:
    return "Oui" if value else "Non"
