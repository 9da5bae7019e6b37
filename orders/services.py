# orders/services.py
"""
Order-card persistence. The header, its frame/lens lines and the payment
row are written in one transaction; line amounts and payment totals are
recomputed here from rate, quantity, tax and discount.
"""

import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from billing.calculations import (
    DISCOUNT_FIXED,
    DISCOUNT_PERCENTAGE,
    apply_item_discount,
    line_totals,
    money,
    order_payment_summary,
    to_decimal,
)
from core.utils import clean_text, to_date, to_int, unique_reference_no
from prescriptions.models import Prescription
from .models import Order, OrderItem, OrderPayment

logger = logging.getLogger(__name__)

ITEM_TYPES = {choice for choice, _ in OrderItem.ITEM_TYPES}


class OrderServiceError(Exception):
    pass


def generate_order_no():
    return unique_reference_no('ORD', Order, 'order_no')


def generate_bill_no():
    return unique_reference_no('BILL', Order, 'bill_no')


def normalize_item(item, position):
    """Clean one posted line and derive its discount and amount."""
    row = {
        'si': to_int(item.get('si'), position) or position,
        'item_type': clean_text(item.get('item_type')).lower() or 'frame',
        'item_code': clean_text(item.get('item_code')),
        'item_name': clean_text(item.get('item_name')),
        'rate': money(item.get('rate')),
        'qty': max(to_int(item.get('qty'), 1) or 1, 1),
        'tax_percent': money(item.get('tax_percent')),
        'brand_name': clean_text(item.get('brand_name')),
        'index': clean_text(item.get('index')),
        'coating': clean_text(item.get('coating')),
    }
    if row['item_type'] not in ITEM_TYPES:
        row['item_type'] = 'other'

    discount_amount = to_decimal(item.get('discount_amount'))
    discount_percent = to_decimal(item.get('discount_percent'))
    if discount_amount > 0:
        row = apply_item_discount(row, DISCOUNT_FIXED, discount_amount)
    elif discount_percent > 0:
        row = apply_item_discount(row, DISCOUNT_PERCENTAGE, discount_percent)

    if 'amount' not in row:
        row.update(
            discount_percent=money(0),
            discount_amount=money(0),
            amount=money(line_totals(row['rate'], row['qty'], row['tax_percent'])['base']),
        )
    return row


def normalize_items(items):
    return [normalize_item(item, position) for position, item in enumerate(items or [], start=1)]


def order_to_dict(order):
    try:
        payment = order.payment
    except OrderPayment.DoesNotExist:
        payment = None

    return {
        'id': order.id,
        'prescription_id': order.prescription_id,
        'order_no': order.order_no,
        'bill_no': order.bill_no,
        'order_date': order.order_date.isoformat() if order.order_date else '',
        'delivery_date': order.delivery_date.isoformat() if order.delivery_date else '',
        'status': order.status,
        'booked_by': order.booked_by,
        'remarks': order.remarks,
        'created_at': order.created_at.isoformat() if order.created_at else None,
        'items': [
            {
                'id': item.id,
                'si': item.si,
                'item_type': item.item_type,
                'item_code': item.item_code,
                'item_name': item.item_name,
                'rate': item.rate,
                'qty': item.qty,
                'amount': item.amount,
                'tax_percent': item.tax_percent,
                'discount_percent': item.discount_percent,
                'discount_amount': item.discount_amount,
                'brand_name': item.brand_name,
                'index': item.index,
                'coating': item.coating,
            }
            for item in order.items.all()
        ],
        'payment': None if payment is None else {
            'payment_estimate': payment.payment_estimate,
            'tax_amount': payment.tax_amount,
            'discount_amount': payment.discount_amount,
            'final_amount': payment.final_amount,
            'advance_cash': payment.advance_cash,
            'advance_card_upi': payment.advance_card_upi,
            'advance_other': payment.advance_other,
            'schedule_amount': payment.schedule_amount,
            'total_advance': payment.total_advance,
            'balance': payment.balance,
        },
    }


def _write_header(order, data):
    order.order_date = to_date(data.get('order_date')) or order.order_date or timezone.localdate()
    order.delivery_date = to_date(data.get('delivery_date'))
    order.status = clean_text(data.get('status')) or 'Processing'
    order.booked_by = clean_text(data.get('booked_by'))
    order.remarks = clean_text(data.get('remarks'))
    order.save()


def _replace_items(order, rows):
    order.items.all().delete()
    OrderItem.objects.bulk_create([OrderItem(order=order, **row) for row in rows])


def _upsert_payment(order, rows, payment):
    payment = payment or {}
    summary = order_payment_summary(
        rows,
        advance_cash=payment.get('advance_cash'),
        advance_card_upi=payment.get('advance_card_upi'),
        advance_other=payment.get('advance_other'),
    )
    record, _ = OrderPayment.objects.get_or_create(order=order)
    record.payment_estimate = summary['payment_estimate']
    record.tax_amount = summary['tax_amount']
    record.discount_amount = summary['discount_amount']
    record.final_amount = summary['final_amount']
    record.advance_cash = money(payment.get('advance_cash'))
    record.advance_card_upi = money(payment.get('advance_card_upi'))
    record.advance_other = money(payment.get('advance_other'))
    record.schedule_amount = money(payment.get('schedule_amount'))
    # total_advance and balance are derived in OrderPayment.save()
    record.save()
    return record


def load_order(order_id):
    return (
        Order.objects
        .select_related('prescription', 'payment')
        .prefetch_related('items')
        .filter(id=order_id)
        .first()
    )


class OrderService:

    @staticmethod
    def save(data):
        try:
            if not data.get('prescription_id'):
                raise OrderServiceError('A prescription must be selected before saving the order')
            prescription_id = to_int(data.get('prescription_id'))
            prescription = None
            if prescription_id is not None:
                prescription = Prescription.objects.filter(id=prescription_id).first()
            if prescription is None:
                raise OrderServiceError('Prescription not found')

            rows = normalize_items(data.get('items'))
            if not rows:
                raise OrderServiceError('Add at least one item to the order')

            order_no = clean_text(data.get('order_no')) or generate_order_no()
            if Order.objects.filter(order_no=order_no).exists():
                raise OrderServiceError(f'Order number {order_no} is already in use')

            with transaction.atomic():
                order = Order(
                    prescription=prescription,
                    order_no=order_no,
                    bill_no=clean_text(data.get('bill_no')) or generate_bill_no(),
                )
                _write_header(order, data)
                _replace_items(order, rows)
                payment = _upsert_payment(order, rows, data.get('payment'))

            logger.info(
                f"Order {order.order_no} saved for {prescription.prescription_no} "
                f"(final {payment.final_amount}, balance {payment.balance})"
            )
            return {
                'success': True,
                'message': 'Order saved successfully',
                'order_id': order.id,
                'order_no': order.order_no,
                'bill_no': order.bill_no,
            }

        except OrderServiceError as e:
            logger.warning(f"Order save rejected: {e}")
            return {'success': False, 'message': str(e)}
        except DatabaseError:
            logger.error("Order save failed", exc_info=True)
            return {'success': False, 'message': 'Failed to save order'}

    @staticmethod
    def update(order_id, data):
        try:
            rows = normalize_items(data.get('items'))
            if not rows:
                raise OrderServiceError('Add at least one item to the order')

            with transaction.atomic():
                order = Order.objects.select_for_update().filter(id=order_id).first()
                if order is None:
                    raise OrderServiceError('Order not found')
                bill_no = clean_text(data.get('bill_no'))
                if bill_no:
                    order.bill_no = bill_no
                _write_header(order, data)
                _replace_items(order, rows)
                _upsert_payment(order, rows, data.get('payment'))

            logger.info(f"Order {order.order_no} updated")
            return {
                'success': True,
                'message': 'Order updated successfully',
                'order_id': order.id,
                'order_no': order.order_no,
                'bill_no': order.bill_no,
            }

        except OrderServiceError as e:
            logger.warning(f"Order update rejected for {order_id}: {e}")
            return {'success': False, 'message': str(e)}
        except DatabaseError:
            logger.error(f"Order update failed for {order_id}", exc_info=True)
            return {'success': False, 'message': 'Failed to update order'}

    @staticmethod
    def get_by_prescription_id(prescription_id):
        orders = (
            Order.objects
            .filter(prescription_id=prescription_id)
            .select_related('payment')
            .prefetch_related('items')
            .order_by('-created_at')
        )
        return [order_to_dict(order) for order in orders]

    @staticmethod
    def get(order_id):
        order = load_order(order_id)
        if order is None:
            return None
        return order_to_dict(order)

    @staticmethod
    def delete(order_id):
        try:
            deleted, _ = Order.objects.filter(id=order_id).delete()
            if not deleted:
                return {'success': False, 'message': 'Order not found'}
            logger.info(f"Order {order_id} deleted")
            return {'success': True, 'message': 'Order deleted successfully'}
        except DatabaseError:
            logger.error(f"Order delete failed for {order_id}", exc_info=True)
            return {'success': False, 'message': 'Failed to delete order'}
