"""
Quotation Totals Calculator
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from .errors import ValidationError
from .models import BOQLineItem, BOQSummary, Totals, to_decimal

CENT = Decimal("0.01")


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def items_cost(line_items: Sequence[BOQLineItem]) -> Decimal:
    return sum((item.total_price for item in line_items), Decimal("0"))


def compute_totals(line_items: Sequence[BOQLineItem], automation_cost=0, tax_percent=18) -> Totals:
    """
    subtotal = automation_cost + sum of line totals
    tax_amount = subtotal x tax_percent / 100, rounded to cents
    grand_total = subtotal + tax_amount

    Everything is computed from one snapshot of the inputs; the returned
    value is immutable.
    """
    automation = to_decimal(automation_cost)
    tax = to_decimal(tax_percent)
    if automation < 0:
        raise ValidationError(f"automation_cost must be >= 0, got {automation}", field="automation_cost")
    if tax < 0:
        raise ValidationError(f"tax_percent must be >= 0, got {tax}", field="tax_percent")

    items = items_cost(line_items)
    subtotal = round_money(items + automation)
    tax_amount = round_money(subtotal * tax / Decimal("100"))
    return Totals(
        items_cost=items,
        automation_cost=automation,
        subtotal=subtotal,
        tax_percent=tax,
        tax_amount=tax_amount,
        grand_total=subtotal + tax_amount,
    )


def summarize_boq(line_items: Sequence[BOQLineItem]) -> BOQSummary:
    return BOQSummary(
        total_items=len(line_items),
        total_quantity=sum(item.quantity for item in line_items),
        total_cost=items_cost(line_items),
    )
