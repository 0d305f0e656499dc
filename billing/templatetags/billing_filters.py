# billing/templatetags/billing_filters.py
from django import template
from decimal import Decimal, InvalidOperation

register = template.Library()


@register.filter
def aud(value):
    """
    Format amount as Australian dollars.
    Usage: {{ row.gross_billing|aud }}
    Returns: "$1,234.50"; missing or invalid values show as "$0.00"
    """
    try:
        amount = Decimal(str(value))
    except (ValueError, TypeError, InvalidOperation):
        return "$0.00"

    if not amount.is_finite():
        return "$0.00"

    amount = amount.quantize(Decimal('0.01'))
    if amount < 0:
        return f"-${-amount:,.2f}"
    return f"${amount:,.2f}"
