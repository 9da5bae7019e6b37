import json
import logging

from django.http import HttpResponse, JsonResponse
from django.shortcuts import render
from django.views.decorators.http import require_GET, require_POST

from core.utils import json_body, staff_required
from orders.printing import bill_context, render_order_card
from .calculations import bill_summary
from .services import (
    SOURCE_TYPES,
    BillingSearchError,
    RecordNotFound,
    format_search_result,
    get_customer_purchase_history,
    get_record_details,
    unified_search,
)

logger = logging.getLogger(__name__)


@staff_required
def billing(request):
    """Billing screen: customer lookup, item table and cash memo"""
    return render(request, 'billing/billing.html', {'source_types': SOURCE_TYPES})


# ─────────────────────────────────────────────────────────────
# AJAX
# ─────────────────────────────────────────────────────────────

@staff_required
@require_GET
def search(request):
    term = request.GET.get('q', '')
    try:
        results = unified_search(term)
    except BillingSearchError as e:
        return JsonResponse({'success': False, 'message': str(e)}, status=500)
    return JsonResponse({
        'success': True,
        'results': [format_search_result(result) for result in results],
    })


@staff_required
@require_GET
def record_details(request, source_type, record_id):
    try:
        record = get_record_details(record_id, source_type)
    except RecordNotFound as e:
        logger.warning(f"Billing record lookup failed: {e}")
        return JsonResponse({'success': False, 'message': str(e)}, status=404)
    return JsonResponse({'success': True, 'record': record})


@staff_required
@require_GET
def purchase_history(request):
    mobile = request.GET.get('mobile', '')
    history = get_customer_purchase_history(mobile)
    return JsonResponse({'success': True, 'mobile': mobile, 'history': history})


@staff_required
@require_POST
def calculate_bill(request):
    data = json_body(request)
    if data is None:
        return JsonResponse({'success': False, 'message': 'Invalid request data'}, status=400)
    summary = bill_summary(data.get('lines') or [], data.get('advances'))
    return JsonResponse({'success': True, 'summary': summary})


@staff_required
@require_POST
def print_bill(request):
    """
    Cash memo for the current billing table.

    Accepts a JSON body, or a form post with the same JSON in ``payload`` so
    the screen can submit into a new window.
    """
    if 'payload' in request.POST:
        try:
            data = json.loads(request.POST['payload'])
        except json.JSONDecodeError:
            data = None
    else:
        data = json_body(request)
    if not isinstance(data, dict):
        return HttpResponse('Invalid bill data', status=400)

    lines = data.get('lines') or []
    if not lines:
        return HttpResponse('Add at least one item to print a bill', status=400)

    summary = bill_summary(lines, data.get('advances'))
    context = bill_context(summary, data.get('customer'), data.get('reference_no', ''))
    return HttpResponse(render_order_card(context))
