# billing/report.py
from decimal import Decimal, InvalidOperation


def to_amount(value):
    """
    Coerce a stored gross_billing value to Decimal.
    Missing or non-numeric values count as zero.
    """
    if value is None or value == '':
        return Decimal('0')

    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal('0')

    if not amount.is_finite():
        return Decimal('0')
    return amount


def compute_total(rows):
    """Sum of gross_billing over exactly the given rows (models or dicts)"""
    total = Decimal('0')
    for row in rows:
        value = row.get('gross_billing') if isinstance(row, dict) else getattr(row, 'gross_billing', None)
        total += to_amount(value)
    return total


def format_amount(value):
    """
    Plain number text for exports: 100.00 -> '100', 100.50 -> '100.5'
    """
    amount = to_amount(value)
    if amount == 0:
        return '0'
    if amount == amount.to_integral_value():
        amount = amount.quantize(Decimal('1'))
    else:
        amount = amount.normalize()
    return format(amount, 'f')
