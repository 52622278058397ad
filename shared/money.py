from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def round2(value) -> Decimal:
    """Round half-up to cents. Applied after every arithmetic step, not only at the end."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
