"""Display formatting for ledger amounts."""

CURRENCY_SYMBOL = "₦"


def format_amount(minor_units: int) -> str:
    """
    Format an amount in kobo as naira, e.g. 1234567 -> "₦12,345.67".

    Integer arithmetic only.
    """
    sign = "-" if minor_units < 0 else ""
    major, minor = divmod(abs(minor_units), 100)
    return f"{sign}{CURRENCY_SYMBOL}{major:,}.{minor:02d}"
