import logging

from django.http import HttpResponse, JsonResponse
from django.shortcuts import render
from django.views.decorators.http import require_GET, require_POST

from billing.calculations import contact_lens_payment_summary
from core.utils import json_body, staff_required
from orders.printing import contact_lens_card_context, render_order_card
from .models import ContactLensItem, ContactLensPayment, ContactLensPrescription
from .services import (
    SEARCH_FIELDS, ContactLensService, generate_contact_lens_prescription_no, load_contact_lens,
)

logger = logging.getLogger(__name__)


@staff_required
def contact_lens_form(request):
    """Contact lens entry screen; ?id= opens an existing job"""
    cl_id = request.GET.get('id')
    context = {
        'contact_lens_id': cl_id if cl_id and cl_id.isdigit() else '',
        'next_prescription_no': generate_contact_lens_prescription_no(),
        'search_fields': list(SEARCH_FIELDS),
        'status_choices': ContactLensPrescription.STATUS_CHOICES,
        'eye_sides': ContactLensItem.EYE_SIDES,
        'payment_modes': ContactLensPayment.PAYMENT_MODES,
    }
    return render(request, 'contact_lens/contact_lens_form.html', context)


# ─────────────────────────────────────────────────────────────
# AJAX
# ─────────────────────────────────────────────────────────────

@staff_required
@require_POST
def save_contact_lens(request):
    data = json_body(request)
    if data is None:
        return JsonResponse({'success': False, 'message': 'Invalid request data'}, status=400)

    result = ContactLensService.save(data)
    return JsonResponse(result, status=200 if result['success'] else 400)


@staff_required
@require_POST
def update_contact_lens(request, cl_id):
    data = json_body(request)
    if data is None:
        return JsonResponse({'success': False, 'message': 'Invalid request data'}, status=400)

    result = ContactLensService.update(cl_id, data)
    if result['success']:
        return JsonResponse(result)
    status = 404 if result['message'] == 'Record not found' else 400
    return JsonResponse(result, status=status)


@staff_required
@require_POST
def delete_contact_lens(request, cl_id):
    result = ContactLensService.delete(cl_id)
    return JsonResponse(result, status=200 if result['success'] else 404)


@staff_required
@require_GET
def get_contact_lens(request, cl_id):
    result = ContactLensService.get_detailed(cl_id)
    return JsonResponse(result, status=200 if result['success'] else 404)


@staff_required
@require_GET
def contact_lens_for_prescription(request, prescription_id):
    contact_lens = ContactLensService.get_by_prescription_id(prescription_id)
    if contact_lens is None:
        return JsonResponse(
            {'success': False, 'message': 'No contact lens prescription for this customer'}, status=404
        )
    return JsonResponse({'success': True, 'data': contact_lens})


@staff_required
@require_GET
def search_patients(request):
    result = ContactLensService.search_patients(
        request.GET.get('field', 'name'),
        request.GET.get('q', ''),
    )
    return JsonResponse(result, status=200 if result['success'] else 400)


@staff_required
@require_POST
def calculate_payment(request):
    data = json_body(request)
    if data is None:
        return JsonResponse({'success': False, 'message': 'Invalid request data'}, status=400)

    summary = contact_lens_payment_summary(data.get('items') or [], data.get('payment'))
    return JsonResponse({'success': True, 'payment': summary})


@staff_required
@require_GET
def print_contact_lens(request, cl_id):
    contact_lens = load_contact_lens(cl_id)
    if contact_lens is None:
        logger.warning(f"Print requested for missing contact lens job {cl_id}")
        return HttpResponse('Contact lens prescription not found', status=404)
    return HttpResponse(render_order_card(contact_lens_card_context(contact_lens)))
