# orders/printing.py
"""
Printable 80mm cards. Each builder returns the template context for
``orders/print/order_card.html``; ``render_order_card`` turns it into the
standalone page that the browser opens in a new window and prints.
"""

import logging

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist
from django.template.loader import render_to_string
from django.utils import timezone

from billing.calculations import ZERO, money

logger = logging.getLogger(__name__)

ORDER_CARD_TEMPLATE = 'orders/print/order_card.html'


def render_order_card(context):
    context = dict(context)
    context.setdefault('shop_name', settings.SHOP_NAME)
    context.setdefault('currency_symbol', settings.CURRENCY_SYMBOL)
    context.setdefault('printed_at', timezone.localtime())
    context.setdefault('auto_print', True)
    html = render_to_string(ORDER_CARD_TEMPLATE, context)
    logger.info(f"Rendered {context.get('title', 'card')} {context.get('order_number', '')}")
    return html


def order_card_context(order):
    try:
        payment = order.payment
    except ObjectDoesNotExist:
        payment = None

    items = [
        {
            'description': ' '.join(p for p in (item.item_name or item.item_code, item.brand_name) if p),
            'qty': item.qty,
            'rate': item.rate,
            'amount': item.amount,
        }
        for item in order.items.all()
    ]
    return {
        'title': 'Order Card',
        'order_number': order.order_no,
        'bill_number': order.bill_no,
        'customer_name': order.prescription.name,
        'customer_mobile': order.prescription.mobile_no or '',
        'booking_date': order.order_date,
        'delivery_date': order.delivery_date,
        'estimate_amount': payment.final_amount if payment else money(sum((i['amount'] for i in items), ZERO)),
        'advance_amount': payment.total_advance if payment else ZERO,
        'balance_amount': payment.balance if payment else ZERO,
        'items': items,
        'remarks': order.remarks,
    }


def contact_lens_card_context(contact_lens):
    try:
        payment = contact_lens.payment
    except ObjectDoesNotExist:
        payment = None

    items = []
    for item in contact_lens.items.all():
        side = {'Right': 'RE', 'Left': 'LE'}.get(item.eye_side, '')
        parts = (item.brand, item.material, item.power, f'({side})' if side else '')
        items.append({
            'description': ' '.join(p for p in parts if p) or 'Contact Lens',
            'qty': item.quantity,
            'rate': item.rate,
            'amount': item.final_amount,
        })

    prescription = contact_lens.prescription
    estimate = ZERO
    if payment is not None:
        estimate = max(ZERO, payment.estimate - payment.discount_amount)
    return {
        'title': 'Contact Lens Card',
        'order_number': prescription.prescription_no,
        'customer_name': prescription.name,
        'customer_mobile': prescription.mobile_no or '',
        'booking_date': timezone.localtime(contact_lens.created_at).date() if contact_lens.created_at else None,
        'delivery_date': contact_lens.delivery_date,
        'estimate_amount': money(estimate),
        'advance_amount': payment.advance if payment else ZERO,
        'balance_amount': payment.balance if payment else ZERO,
        'items': items,
        'remarks': contact_lens.remarks,
    }


def bill_context(summary, customer=None, reference_no=''):
    """Cash memo from a ``billing.calculations.bill_summary`` result."""
    customer = customer or {}
    items = [
        {
            'description': line.get('item_name') or line.get('item_code') or 'Item',
            'qty': line.get('qty', 1),
            'rate': money(line.get('rate')),
            'amount': line['amount'] - line['discount'],
        }
        for line in summary['lines']
    ]
    return {
        'title': 'Cash Memo',
        'order_number': reference_no,
        'customer_name': customer.get('name', ''),
        'customer_mobile': customer.get('mobile', ''),
        'booking_date': timezone.localdate(),
        'delivery_date': None,
        'estimate_amount': summary['payable'],
        'advance_amount': summary['advance'],
        'balance_amount': summary['balance'],
        'tax_amount': summary['tax_amount'],
        'discount_amount': summary['scheme_discount'],
        'items': items,
        'remarks': customer.get('remarks', ''),
    }
