import logging

from django.contrib import messages
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_GET, require_POST

from core.utils import json_body, staff_required
from .models import EyePrescription, PrescriptionRemarks
from .services import SEARCH_FIELDS, PrescriptionService, generate_prescription_no

logger = logging.getLogger(__name__)


def _form_context(prescription=None):
    return {
        'prescription': prescription,
        'next_prescription_no': None if prescription else generate_prescription_no(),
        'search_fields': SEARCH_FIELDS,
        'eye_types': EyePrescription.EYE_TYPES,
        'vision_types': EyePrescription.VISION_TYPES,
        'remark_flags': [
            (flag, flag.replace('_', ' ').title()) for flag in PrescriptionRemarks.FLAGS
        ],
    }


@staff_required
def prescription_form(request):
    """Blank prescription entry screen"""
    return render(request, 'prescriptions/prescription_form.html', _form_context())


@staff_required
def prescription_new(request):
    messages.info(request, 'New prescription started.')
    return redirect('prescriptions:prescription_form')


@staff_required
def prescription_edit(request, prescription_id):
    prescription = PrescriptionService.get(prescription_id)
    if prescription is None:
        logger.warning(f"Edit requested for missing prescription {prescription_id}")
        messages.error(request, 'Prescription not found.')
        return redirect('prescriptions:prescription_form')
    return render(request, 'prescriptions/prescription_form.html', _form_context(prescription))


@staff_required
@require_POST
def prescription_delete(request, prescription_id):
    result = PrescriptionService.delete(prescription_id)
    if result['success']:
        messages.success(request, result['message'])
    else:
        messages.error(request, result['message'])
    return redirect('prescriptions:prescription_form')


# ─────────────────────────────────────────────────────────────
# AJAX
# ─────────────────────────────────────────────────────────────

@staff_required
@require_POST
def save_prescription(request):
    data = json_body(request)
    if data is None:
        return JsonResponse({'success': False, 'message': 'Invalid request data'}, status=400)

    result = PrescriptionService.save(data, prescription_id=data.get('id'))
    return JsonResponse(result, status=200 if result['success'] else 400)


@staff_required
@require_GET
def search_prescriptions(request):
    field = request.GET.get('field', 'name')
    query = request.GET.get('q', '')
    if field not in SEARCH_FIELDS:
        return JsonResponse({'success': False, 'message': f'Unsupported search field: {field}'}, status=400)
    results = PrescriptionService.search(field, query)
    return JsonResponse({'success': True, 'results': results})


@staff_required
@require_GET
def get_prescription_data(request, prescription_id):
    prescription = PrescriptionService.get(prescription_id)
    if prescription is None:
        return JsonResponse({'success': False, 'message': 'Prescription not found'}, status=404)
    return JsonResponse({'success': True, 'prescription': prescription})
