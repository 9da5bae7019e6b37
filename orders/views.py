import logging

from django.contrib import messages
from django.http import HttpResponse, JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_GET, require_POST

from billing.calculations import DISCOUNT_FIXED, DISCOUNT_PERCENTAGE, apply_discount_to_all, order_payment_summary
from core.utils import json_body, staff_required
from prescriptions.services import PrescriptionService
from .models import Order, OrderItem
from .printing import order_card_context, render_order_card
from .services import OrderService, generate_bill_no, generate_order_no, load_order, normalize_items

logger = logging.getLogger(__name__)


def _card_context(order=None, prescription=None):
    return {
        'order': order,
        'prescription': prescription,
        'next_order_no': None if order else generate_order_no(),
        'next_bill_no': None if order else generate_bill_no(),
        'status_choices': Order.ORDER_STATUS,
        'item_types': OrderItem.ITEM_TYPES,
    }


@staff_required
def order_card(request):
    """Blank order card; ?prescription=<id> preloads the customer"""
    prescription = None
    prescription_id = request.GET.get('prescription')
    if prescription_id and prescription_id.isdigit():
        prescription = PrescriptionService.get(int(prescription_id))
        if prescription is None:
            messages.warning(request, 'Prescription not found.')
    return render(request, 'orders/order_card.html', _card_context(prescription=prescription))


@staff_required
def order_detail(request, order_id):
    order = OrderService.get(order_id)
    if order is None:
        messages.error(request, 'Order not found.')
        return redirect('orders:order_card')
    prescription = PrescriptionService.get(order['prescription_id'])
    return render(request, 'orders/order_card.html', _card_context(order, prescription))


# ─────────────────────────────────────────────────────────────
# AJAX
# ─────────────────────────────────────────────────────────────

@staff_required
@require_POST
def save_order(request):
    data = json_body(request)
    if data is None:
        return JsonResponse({'success': False, 'message': 'Invalid request data'}, status=400)

    result = OrderService.save(data)
    return JsonResponse(result, status=200 if result['success'] else 400)


@staff_required
@require_POST
def update_order(request, order_id):
    data = json_body(request)
    if data is None:
        return JsonResponse({'success': False, 'message': 'Invalid request data'}, status=400)

    result = OrderService.update(order_id, data)
    if result['success']:
        return JsonResponse(result)
    status = 404 if result['message'] == 'Order not found' else 400
    return JsonResponse(result, status=status)


@staff_required
@require_POST
def delete_order(request, order_id):
    result = OrderService.delete(order_id)
    return JsonResponse(result, status=200 if result['success'] else 404)


@staff_required
@require_GET
def orders_for_prescription(request, prescription_id):
    prescription = PrescriptionService.get(prescription_id)
    if prescription is None:
        return JsonResponse({'success': False, 'message': 'Prescription not found'}, status=404)
    return JsonResponse({
        'success': True,
        'prescription': prescription,
        'orders': OrderService.get_by_prescription_id(prescription_id),
    })


@staff_required
@require_POST
def calculate_order(request):
    """
    Recalculate line amounts and the payment block for the order card.

    An optional ``discount`` object ``{"type": "percentage"|"fixed", "value": n}``
    spreads one discount across all lines before totalling.
    """
    data = json_body(request)
    if data is None:
        return JsonResponse({'success': False, 'message': 'Invalid request data'}, status=400)

    items = normalize_items(data.get('items'))
    discount = data.get('discount')
    if discount:
        kind = discount.get('type', DISCOUNT_PERCENTAGE)
        if kind not in (DISCOUNT_PERCENTAGE, DISCOUNT_FIXED):
            return JsonResponse({'success': False, 'message': f'Unknown discount type: {kind}'}, status=400)
        try:
            items = apply_discount_to_all(items, kind, discount.get('value'))
        except ValueError as e:
            return JsonResponse({'success': False, 'message': str(e)}, status=400)

    payment = data.get('payment') or {}
    summary = order_payment_summary(
        items,
        advance_cash=payment.get('advance_cash'),
        advance_card_upi=payment.get('advance_card_upi'),
        advance_other=payment.get('advance_other'),
    )
    return JsonResponse({'success': True, 'items': items, 'payment': summary})


@staff_required
@require_GET
def print_order(request, order_id):
    order = load_order(order_id)
    if order is None:
        logger.warning(f"Print requested for missing order {order_id}")
        return HttpResponse('Order not found', status=404)
    return HttpResponse(render_order_card(order_card_context(order)))
