# billing/calculations.py
"""
Payment arithmetic for the order card, contact-lens card and billing screen.

Everything here works on plain dicts and Decimal values so the same code
serves the JSON calculate endpoints, the services that persist payments and
the printed cards. Amounts are rounded to two places with ROUND_HALF_UP.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from core.utils import to_int

ZERO = Decimal('0.00')
HUNDRED = Decimal('100')
CENT = Decimal('0.01')

DISCOUNT_PERCENTAGE = 'percentage'
DISCOUNT_FIXED = 'fixed'


def to_decimal(value, default=0):
    """Lenient money parse: blank, None, junk and nan/inf fall back to ``default``."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return Decimal(str(default))
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, TypeError, ValueError):
            return Decimal(str(default))
    if not result.is_finite():
        return Decimal(str(default))
    return result


def money(value):
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def clamp(value, low, high):
    return max(low, min(value, high))


def balance(estimate, discount=0, advance=0):
    """Estimate minus discount minus advance, never below zero."""
    remaining = max(ZERO, to_decimal(estimate) - to_decimal(discount))
    return money(max(ZERO, remaining - to_decimal(advance)))


# ─────────────────────────────────────────────────────────────
# ORDER CARD
# ─────────────────────────────────────────────────────────────

def line_totals(rate, qty, tax_percent=0):
    base = to_decimal(rate) * to_decimal(qty, 1)
    tax = base * to_decimal(tax_percent) / HUNDRED
    return {
        'base': base,
        'tax': tax,
        'total_with_tax': base + tax,
    }


def apply_item_discount(item, kind, value):
    """
    Discount one order line on its tax-inclusive total.

    ``percentage`` is clamped to 0..100. ``fixed`` is capped at the line
    total and the percent is derived from it. The stored ``amount`` is the
    base after removing the discount's base share.
    """
    totals = line_totals(item.get('rate'), item.get('qty', 1), item.get('tax_percent'))
    base, total = totals['base'], totals['total_with_tax']
    if base <= 0 or total <= 0:
        return dict(item)

    value = to_decimal(value)
    if kind == DISCOUNT_FIXED:
        discount = clamp(value, ZERO, total)
        percent = discount / total * HUNDRED
    else:
        percent = clamp(value, ZERO, HUNDRED)
        discount = total * percent / HUNDRED

    updated = dict(item)
    updated['discount_percent'] = money(percent)
    updated['discount_amount'] = money(discount)
    updated['amount'] = money(base - discount * base / total)
    return updated


def apply_discount_to_all(items, kind, value):
    """Spread one discount over every line, proportional to line totals."""
    value = to_decimal(value)
    if value <= 0:
        raise ValueError('Please enter a valid discount value (greater than 0)')

    grand_total = sum(
        (line_totals(i.get('rate'), i.get('qty', 1), i.get('tax_percent'))['total_with_tax'] for i in items),
        ZERO,
    )
    if not items or grand_total <= 0:
        raise ValueError('No items to apply discount to')

    if kind == DISCOUNT_FIXED:
        discount = min(value, grand_total)
    else:
        discount = grand_total * clamp(value, ZERO, HUNDRED) / HUNDRED

    updated = []
    for item in items:
        totals = line_totals(item.get('rate'), item.get('qty', 1), item.get('tax_percent'))
        base, total = totals['base'], totals['total_with_tax']
        row = dict(item)
        if total <= 0:
            row.update(discount_amount=ZERO, discount_percent=ZERO, amount=money(base))
        else:
            share = discount * total / grand_total
            row.update(
                discount_amount=money(share),
                discount_percent=money(share / total * HUNDRED),
                amount=money(base - share * base / total),
            )
        updated.append(row)
    return updated


def order_payment_summary(items, advance_cash=0, advance_card_upi=0, advance_other=0):
    base_total = ZERO
    tax_total = ZERO
    discount_total = ZERO
    for item in items:
        totals = line_totals(item.get('rate'), item.get('qty', 1), item.get('tax_percent'))
        base_total += totals['base']
        tax_total += totals['tax']
        discount_total += to_decimal(item.get('discount_amount'))

    estimate = base_total + tax_total
    final = estimate - discount_total
    total_advance = to_decimal(advance_cash) + to_decimal(advance_card_upi) + to_decimal(advance_other)
    return {
        'payment_estimate': money(estimate),
        'tax_amount': money(tax_total),
        'discount_amount': money(discount_total),
        'final_amount': money(final),
        'total_advance': money(total_advance),
        'balance': money(max(ZERO, final - total_advance)),
    }


# ─────────────────────────────────────────────────────────────
# CONTACT LENS CARD
# ─────────────────────────────────────────────────────────────

def contact_lens_item_amounts(qty, rate, discount_percent=0):
    gross = to_decimal(to_int(qty, 1)) * to_decimal(rate)
    percent = clamp(to_decimal(discount_percent), ZERO, HUNDRED)
    discount = gross * percent / HUNDRED
    return {
        'gross': money(gross),
        'discount_amount': money(discount),
        'final_amount': money(gross - discount),
    }


def contact_lens_payment_summary(items, payment):
    payment = payment or {}
    gross_total = ZERO
    final_total = ZERO
    for item in items:
        amounts = contact_lens_item_amounts(
            item.get('quantity', item.get('qty', 1)),
            item.get('rate'),
            item.get('discount_percent', item.get('discountPercent', 0)),
        )
        gross_total += amounts['gross']
        final_total += amounts['final_amount']

    estimate = to_decimal(payment.get('estimate'))
    if estimate <= 0:
        estimate = gross_total
    discount = to_decimal(payment.get('discount_amount'))
    advance = (
        to_decimal(payment.get('cash_advance'))
        + to_decimal(payment.get('card_upi_advance'))
        + to_decimal(payment.get('cheque_advance'))
    )
    return {
        'payment_total': money(final_total),
        'estimate': money(estimate),
        'discount_amount': money(discount),
        'advance': money(advance),
        'balance': balance(estimate, discount, advance),
    }


# ─────────────────────────────────────────────────────────────
# BILLING SCREEN
# ─────────────────────────────────────────────────────────────

def bill_summary(lines, advances=None):
    """Cash-memo totals: each line is qty x rate less its discount, plus tax."""
    advances = advances or {}
    rows = []
    estimate = ZERO
    scheme_discount = ZERO
    tax_total = ZERO
    for line in lines:
        amount = to_decimal(line.get('qty'), 1) * to_decimal(line.get('rate'))
        percent = clamp(to_decimal(line.get('discount_percent')), ZERO, HUNDRED)
        discount = amount * percent / HUNDRED
        tax = (amount - discount) * to_decimal(line.get('tax_percent')) / HUNDRED
        estimate += amount
        scheme_discount += discount
        tax_total += tax
        row = dict(line)
        row.update(
            amount=money(amount),
            discount=money(discount),
            discount_percent=money(percent),
            tax_amount=money(tax),
        )
        rows.append(row)

    payable = estimate - scheme_discount + tax_total
    advance = sum((to_decimal(v) for v in advances.values()), ZERO)
    return {
        'lines': rows,
        'estimate': money(estimate),
        'scheme_discount': money(scheme_discount),
        'tax_amount': money(tax_total),
        'payable': money(payable),
        'advance': money(advance),
        'balance': money(max(ZERO, payable - advance)),
    }
