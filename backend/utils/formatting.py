from decimal import Decimal, ROUND_HALF_UP

CURRENCY_CODE = "EGP"

def format_currency(amount) -> str:
    """Format an amount in Egyptian pounds, e.g. 1,234.50 EGP."""
    if amount is None:
        amount = 0
    amount = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{amount:,.2f} {CURRENCY_CODE}"

def format_currency_compact(amount) -> str:
    amount = Decimal(str(amount or 0))
    if amount >= 1000000:
        return f"{amount / 1000000:.1f}M {CURRENCY_CODE}"
    if amount >= 1000:
        return f"{amount / 1000:.1f}K {CURRENCY_CODE}"
    return format_currency(amount)
