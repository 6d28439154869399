from decimal import Decimal, ROUND_HALF_UP

MONEY_QUANT = Decimal("0.01")


def to_money(value: Decimal | int | float | str) -> Decimal:
    return Decimal(str(value)).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def format_money(value: float | int | None) -> str:
    """Two-decimal display form; aggregation code keeps raw floats."""
    return f"{to_money(value or 0):,.2f}"
