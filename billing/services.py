# billing/services.py
"""
Customer lookup for the billing screen.

``unified_search`` queries orders, contact-lens jobs and eyeglass
prescriptions, then folds the prescription and contact-lens hits that share
a mobile number into one ``P, CL`` entry. Orders are always listed on their
own. ``get_record_details`` loads a picked result into billing-table rows and
``get_customer_purchase_history`` flattens everything bought under a mobile
number.
"""

import logging

from django.core.exceptions import ObjectDoesNotExist
from django.db import DatabaseError
from django.db.models import Q
from django.utils import timezone

from contact_lens.models import ContactLensPrescription
from core.utils import clean_text, to_date
from orders.models import Order
from prescriptions.models import Prescription
from prescriptions.services import format_prescription_details
from .calculations import ZERO, money

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20
CONTACT_LENS_PRESCRIPTION_LIMIT = 50

JOB_PRESCRIPTION = 'P'
JOB_CONTACT_LENS = 'CL'
JOB_MERGED = 'P, CL'
JOB_ORDER = 'Order'

SOURCE_ORDER = 'order'
SOURCE_CONTACT_LENS = 'contact_lens'
SOURCE_PRESCRIPTION = 'prescription'
SOURCE_TYPES = (SOURCE_ORDER, SOURCE_CONTACT_LENS, SOURCE_PRESCRIPTION)


class BillingSearchError(Exception):
    pass


class RecordNotFound(Exception):
    pass


# ─────────────────────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────────────────────

def _iso(value):
    if value is None:
        return ''
    if hasattr(value, 'hour'):
        return timezone.localtime(value).isoformat() if timezone.is_aware(value) else value.isoformat()
    return value.isoformat()


def _contact_mobile(prescription):
    if prescription is None:
        return ''
    return prescription.mobile_no or prescription.phone_landline or ''


def _customer_fields(prescription):
    return {
        'name': (prescription.name if prescription else '') or 'Unknown Customer',
        'mobile': _contact_mobile(prescription),
        'email': prescription.email if prescription else '',
        'address': prescription.address if prescription else '',
        'city': prescription.city if prescription else '',
        'state': prescription.state if prescription else '',
        'pin_code': prescription.pin_code if prescription else '',
    }


def _eye_label(eye_side):
    return {'Right': 'RE', 'Left': 'LE'}.get(eye_side, '')


def _payment_balance(record):
    try:
        return record.payment.balance
    except ObjectDoesNotExist:
        return ZERO


def _dedupe(*querysets):
    seen = set()
    rows = []
    for queryset in querysets:
        for row in queryset:
            if row.id not in seen:
                seen.add(row.id)
                rows.append(row)
    return rows


def _prescription_original(prescription):
    return {
        'prescription_id': prescription.id,
        'prescription_no': prescription.prescription_no,
        'reference_no': prescription.reference_no,
        'name': prescription.name,
        'mobile_no': prescription.mobile_no or '',
        'phone_landline': prescription.phone_landline,
        'source': prescription.source,
        'date': _iso(prescription.date),
    }


def _contact_lens_item_name(item):
    eye = _eye_label(item.eye_side)
    parts = [item.brand, item.material, item.power, f'({eye})' if eye else '']
    return ' '.join(p for p in parts if p)


def _contact_lens_item_code(item):
    return f"CL-{(item.brand or '')[:3].upper() or 'LENS'}"


# ─────────────────────────────────────────────────────────────
# PER-TYPE SEARCHES
# ─────────────────────────────────────────────────────────────

def search_orders(term):
    try:
        base = Order.objects.select_related('prescription', 'payment').prefetch_related('items')
        by_number = base.filter(
            Q(order_no__icontains=term) | Q(bill_no__icontains=term)
        ).order_by('-order_date', '-created_at')[:SEARCH_LIMIT]
        by_customer = base.filter(
            Q(prescription__name__icontains=term)
            | Q(prescription__mobile_no__icontains=term)
            | Q(prescription__phone_landline__icontains=term)
        ).order_by('-order_date', '-created_at')[:SEARCH_LIMIT]
        orders = _dedupe(by_number, by_customer)
    except DatabaseError:
        logger.error(f"Order search failed for '{term}'", exc_info=True)
        return []

    results = []
    for order in orders:
        items = list(order.items.all())
        result = {
            'id': order.id,
            'source_type': SOURCE_ORDER,
            'reference_no': order.order_no or order.bill_no or 'N/A',
            'date': _iso(order.order_date or order.created_at),
            'total_amount': money(sum((i.amount for i in items), ZERO)),
            'balance_amount': _payment_balance(order),
            'item_count': len(items),
            'job_type': JOB_ORDER,
            'original_data': {
                'order_id': order.id,
                'order_no': order.order_no,
                'bill_no': order.bill_no,
                'status': order.status,
                'prescription_id': order.prescription_id,
            },
        }
        result.update(_customer_fields(order.prescription))
        results.append(result)
    return results


def search_contact_lenses(term):
    try:
        prescriptions = list(
            Prescription.objects.filter(
                Q(prescription_no__icontains=term)
                | Q(name__icontains=term)
                | Q(mobile_no__icontains=term)
                | Q(phone_landline__icontains=term)
            )[:CONTACT_LENS_PRESCRIPTION_LIMIT]
        )
        if not prescriptions:
            return []
        by_id = {p.id: p for p in prescriptions}
        jobs = list(
            ContactLensPrescription.objects
            .filter(prescription_id__in=by_id)
            .select_related('payment')
            .prefetch_related('items')
            .order_by('-created_at')
        )
    except DatabaseError:
        logger.error(f"Contact lens search failed for '{term}'", exc_info=True)
        return []

    results = []
    for job in jobs:
        prescription = by_id.get(job.prescription_id)
        items = [
            {
                'id': item.id,
                'item_name': _contact_lens_item_name(item),
                'item_code': _contact_lens_item_code(item),
                'quantity': item.quantity,
                'rate': item.rate,
                'amount': item.final_amount,
                'tax_percent': ZERO,
                'discount_percent': item.discount_percent,
                'discount_amount': item.discount_amount,
                'eye_side': _eye_label(item.eye_side),
            }
            for item in job.items.all()
        ]
        original = _prescription_original(prescription) if prescription else {}
        original.update(contact_lens_id=job.id, status=job.status, items=items)
        result = {
            'id': job.id,
            'source_type': SOURCE_CONTACT_LENS,
            'reference_no': (prescription.prescription_no if prescription else '') or 'N/A',
            'date': _iso(job.created_at),
            'total_amount': money(sum((i['amount'] for i in items), ZERO)),
            'balance_amount': _payment_balance(job),
            'item_count': len(items),
            'job_type': JOB_CONTACT_LENS,
            'items': items,
            'original_data': original,
        }
        result.update(_customer_fields(prescription))
        results.append(result)
    return results


def search_prescriptions(term):
    try:
        base = Prescription.objects.filter(
            source=Prescription.SOURCE_PRESCRIPTION
        ).order_by('-date', '-created_at')
        direct = base.filter(prescription_no__icontains=term)[:SEARCH_LIMIT]
        by_customer = base.filter(
            Q(name__icontains=term)
            | Q(mobile_no__icontains=term)
            | Q(phone_landline__icontains=term)
        )[:SEARCH_LIMIT]
        prescriptions = _dedupe(direct, by_customer)
    except DatabaseError:
        logger.error(f"Prescription search failed for '{term}'", exc_info=True)
        return []

    results = []
    for prescription in prescriptions:
        items = [{
            'id': f'prescription-{prescription.id}',
            'item_name': 'Eye Examination',
            'item_code': 'EXAM',
            'quantity': 1,
            'rate': ZERO,
            'amount': ZERO,
            'tax_percent': ZERO,
            'discount_percent': ZERO,
            'discount_amount': ZERO,
        }]
        result = {
            'id': prescription.id,
            'source_type': SOURCE_PRESCRIPTION,
            'reference_no': prescription.prescription_no or prescription.reference_no or 'N/A',
            'date': _iso(prescription.date or prescription.created_at),
            'total_amount': ZERO,
            'balance_amount': ZERO,
            'item_count': len(items),
            'job_type': JOB_PRESCRIPTION,
            'items': items,
            'original_data': _prescription_original(prescription),
        }
        result.update(_customer_fields(prescription))
        results.append(result)
    return results


# ─────────────────────────────────────────────────────────────
# UNIFIED SEARCH
# ─────────────────────────────────────────────────────────────

def merge_results(orders, contact_lenses, prescriptions):
    """Fold P and CL hits by mobile number; orders stay separate."""
    by_mobile = {}
    results = []

    for prescription in prescriptions:
        mobile = prescription['mobile']
        if not mobile or mobile in by_mobile:
            continue
        entry = dict(prescription)
        entry['job_type'] = JOB_PRESCRIPTION
        entry['original_data'] = dict(
            prescription['original_data'], is_merged=False, source_types=[SOURCE_PRESCRIPTION]
        )
        by_mobile[mobile] = entry
        results.append(entry)

    for contact_lens in contact_lenses:
        mobile = contact_lens['mobile']
        if not mobile:
            continue
        existing = by_mobile.get(mobile)
        if existing is None:
            entry = dict(contact_lens)
            entry['job_type'] = JOB_CONTACT_LENS
            entry['original_data'] = dict(
                contact_lens['original_data'], is_merged=False, source_types=[SOURCE_CONTACT_LENS]
            )
            by_mobile[mobile] = entry
            results.append(entry)
        elif existing['job_type'] == JOB_PRESCRIPTION:
            existing['job_type'] = JOB_MERGED
            existing['reference_no'] = f"{existing['reference_no']} | {contact_lens['reference_no']}"
            existing['original_data'] = dict(
                existing['original_data'],
                **contact_lens['original_data'],
                is_merged=True,
                source_types=[SOURCE_PRESCRIPTION, SOURCE_CONTACT_LENS],
            )

    for order in orders:
        entry = dict(order)
        entry['job_type'] = JOB_ORDER
        entry['original_data'] = dict(order['original_data'], is_merged=False, source_types=[SOURCE_ORDER])
        results.append(entry)

    results.sort(key=lambda r: r['date'], reverse=True)
    return results


def unified_search(term):
    term = clean_text(term).lower()
    if not term:
        return []
    try:
        orders = search_orders(term)
        contact_lenses = search_contact_lenses(term)
        prescriptions = search_prescriptions(term)
        results = merge_results(orders, contact_lenses, prescriptions)
    except Exception as e:
        logger.error(f"Unified search failed for '{term}': {e}", exc_info=True)
        raise BillingSearchError('Search failed. Please try again.') from e

    logger.info(
        f"Unified search '{term}': {len(orders)} orders, {len(contact_lenses)} contact lens, "
        f"{len(prescriptions)} prescriptions -> {len(results)} results"
    )
    return results


def format_search_result(result):
    shown_date = to_date(result.get('date'))
    sub_label = [
        result.get('mobile'),
        result.get('job_type'),
        shown_date.strftime('%d-%m-%Y') if shown_date else '',
        f"Items: {result.get('item_count', 0)}",
    ]
    return {
        'id': result['id'],
        'label': f"{result['name']} ({result['reference_no']})",
        'sub_label': ' • '.join(part for part in sub_label if part),
        'source_type': result['source_type'],
        'job_type': result.get('job_type'),
        'original_data': result.get('original_data'),
    }


# ─────────────────────────────────────────────────────────────
# RECORD DETAILS
# ─────────────────────────────────────────────────────────────

def _order_details(record_id):
    order = (
        Order.objects.select_related('prescription', 'payment')
        .prefetch_related('items')
        .filter(id=record_id)
        .first()
    )
    if order is None:
        raise RecordNotFound('Order not found')

    items = [
        {
            'id': item.id,
            'item_code': item.item_code,
            'item_name': item.item_name,
            'rate': item.rate,
            'tax_percent': item.tax_percent,
            'qty': item.qty,
            'amount': item.amount,
            'order_no': order.order_no,
            'discount': item.discount_amount,
            'discount_percent': item.discount_percent,
            'source_type': SOURCE_ORDER,
        }
        for item in order.items.all()
    ]
    details = {
        'id': order.id,
        'type': SOURCE_ORDER,
        'reference_no': order.order_no,
        'bill_no': order.bill_no,
        'date': _iso(order.order_date),
        'status': order.status,
        'prescription_id': order.prescription_id,
        'items': items,
        'total_amount': money(sum((i['amount'] for i in items), ZERO)),
        'balance_amount': _payment_balance(order),
    }
    details.update(_customer_fields(order.prescription))
    return details


def _contact_lens_details(record_id):
    job = (
        ContactLensPrescription.objects.select_related('prescription', 'payment')
        .prefetch_related('items')
        .filter(id=record_id)
        .first()
    )
    if job is None:
        raise RecordNotFound('Contact lens prescription not found')

    prescription_no = job.prescription.prescription_no
    items = []
    for item in job.items.all():
        name_parts = [
            item.brand,
            item.material,
            f'P:{item.power}' if item.power else '',
            f'BC:{item.base_curve}' if item.base_curve else '',
            f'DIA:{item.diameter}' if item.diameter else '',
        ]
        items.append({
            'id': item.id,
            'item_code': item.brand,
            'item_name': ' '.join(p for p in name_parts if p),
            'rate': item.rate,
            'tax_percent': ZERO,
            'qty': item.quantity,
            'amount': item.final_amount,
            'order_no': prescription_no,
            'discount': item.discount_amount,
            'discount_percent': item.discount_percent,
            'source_type': SOURCE_CONTACT_LENS,
            'eye_side': item.eye_side,
        })
    details = {
        'id': job.id,
        'type': SOURCE_CONTACT_LENS,
        'reference_no': prescription_no,
        'date': _iso(job.created_at),
        'status': job.status,
        'prescription_id': job.prescription_id,
        'items': items,
        'total_amount': money(sum((i['amount'] for i in items), ZERO)),
        'balance_amount': _payment_balance(job),
    }
    details.update(_customer_fields(job.prescription))
    return details


def _prescription_details(record_id):
    prescription = Prescription.objects.filter(id=record_id).first()
    if prescription is None:
        raise RecordNotFound('Prescription not found')
    details = _prescription_original(prescription)
    details.update(_customer_fields(prescription))
    details.update(id=prescription.id, type=SOURCE_PRESCRIPTION)
    return details


def get_record_details(record_id, source_type):
    loaders = {
        SOURCE_ORDER: _order_details,
        SOURCE_CONTACT_LENS: _contact_lens_details,
        SOURCE_PRESCRIPTION: _prescription_details,
    }
    loader = loaders.get(source_type)
    if loader is None:
        raise RecordNotFound(f'Invalid source type: {source_type}')
    return loader(record_id)


# ─────────────────────────────────────────────────────────────
# PURCHASE HISTORY
# ─────────────────────────────────────────────────────────────

def _order_item_details(item):
    details = []
    if item.item_type == 'frame' and item.brand_name:
        details.append(f'Brand: {item.brand_name}')
    if item.item_type == 'lens':
        if item.coating:
            details.append(f'Coating: {item.coating}')
        if item.index:
            details.append(f'Index: {item.index}')
    return ' | '.join(details)


def _contact_lens_item_details(item):
    details = []
    eye = _eye_label(item.eye_side)
    if eye:
        details.append(f'Eye: {eye}')
    for label, value in (
        ('Brand', item.brand),
        ('Material', item.material),
        ('BC', item.base_curve),
        ('DIA', item.diameter),
        ('Power', item.power),
        ('Cyl', item.cyl),
        ('Axis', item.axis),
        ('Disposal', item.dispose),
    ):
        if value:
            details.append(f'{label}: {value}')
    return ' | '.join(details)


def get_customer_purchase_history(mobile):
    mobile = clean_text(mobile)
    if not mobile:
        return []

    prescriptions = (
        Prescription.objects
        .filter(Q(mobile_no__icontains=mobile) | Q(phone_landline__icontains=mobile))
        .prefetch_related('eye_prescriptions', 'orders__items', 'contact_lens__items')
        .order_by('-date')
    )

    rows = []
    for prescription in prescriptions:
        # contact-lens customer records carry no eye examination of their own
        if prescription.source == Prescription.SOURCE_PRESCRIPTION:
            doctor = f'(Dr. {prescription.prescribed_by})' if prescription.prescribed_by else ''
            rows.append({
                'id': f'rx_{prescription.id}',
                'type': SOURCE_PRESCRIPTION,
                'date': _iso(prescription.date or prescription.created_at),
                'reference_no': prescription.prescription_no,
                'item_name': ' '.join(p for p in ('Eye Examination', doctor) if p),
                'item_code': 'RX-EXAM',
                'item_details': format_prescription_details(prescription),
                'quantity': 1,
                'rate': ZERO,
                'amount': ZERO,
                'discount_percent': ZERO,
                'discount_amount': ZERO,
                'tax_percent': ZERO,
            })

        for order in prescription.orders.all():
            for item in order.items.all():
                brand = f'({item.brand_name})' if item.brand_name else ''
                rows.append({
                    'id': f'order_{order.id}_{item.id}',
                    'type': SOURCE_ORDER,
                    'item_type': item.item_type,
                    'date': _iso(order.order_date or order.created_at),
                    'reference_no': order.order_no,
                    'item_name': ' '.join(p for p in (item.item_name, brand) if p) or 'Unnamed Item',
                    'item_code': item.item_code or f'{item.item_type[:3].upper()}-{item.id}',
                    'item_details': _order_item_details(item),
                    'quantity': item.qty,
                    'rate': item.rate,
                    'amount': item.amount,
                    'discount_percent': item.discount_percent,
                    'discount_amount': item.discount_amount,
                    'tax_percent': item.tax_percent,
                    'status': order.status,
                    'prescription_no': prescription.prescription_no,
                })

        try:
            job = prescription.contact_lens
        except ContactLensPrescription.DoesNotExist:
            job = None
        if job is not None:
            for item in job.items.all():
                eye = _eye_label(item.eye_side)
                power = f'({item.power})' if item.power else ''
                name_parts = (item.brand or 'Contact Lens', item.material, power, f'[{eye}]' if eye else '')
                rows.append({
                    'id': f'cl_{job.id}_{item.id}',
                    'type': SOURCE_CONTACT_LENS,
                    'date': _iso(job.created_at),
                    'reference_no': prescription.prescription_no,
                    'item_name': ' '.join(p for p in name_parts if p),
                    'item_code': _contact_lens_item_code(item),
                    'item_details': _contact_lens_item_details(item),
                    'quantity': item.quantity,
                    'rate': item.rate,
                    'amount': item.final_amount,
                    'discount_percent': item.discount_percent,
                    'discount_amount': item.discount_amount,
                    'tax_percent': ZERO,
                    'eye_side': eye,
                    'prescription_no': prescription.prescription_no,
                })

    rows.sort(key=lambda r: r['date'], reverse=True)
    logger.info(f"Purchase history for '{mobile}': {len(rows)} rows")
    return rows
