# contact_lens/services.py
"""
Contact-lens jobs: the header, per-eye readings, lens line items and the
payment row are written together against a main prescription record that
is found or created by mobile number.
"""

import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from billing.calculations import HUNDRED, ZERO, clamp, contact_lens_payment_summary, money, to_decimal
from core.utils import blank_to_none, clean_text, to_date, to_int, to_time, unique_reference_no
from prescriptions.models import Prescription
from .models import ContactLensEye, ContactLensItem, ContactLensPayment, ContactLensPrescription

logger = logging.getLogger(__name__)

DEFAULT_PRESCRIBED_BY = 'Contact Lens Dept'

HEADER_TEXT_FIELDS = (
    'booked_by', 'remarks', 'reference_no', 'customer_code', 'pin',
    'phone_landline', 'prescribed_by',
)
HEADER_DATE_FIELDS = (
    'delivery_date', 'retest_date', 'expiry_date', 'birth_day', 'marriage_anniversary',
)
EYE_FIELDS = ('sph', 'cyl', 'axis', 'add_power', 'vn', 'rpd', 'lpd', 'ipd')

# search field -> Prescription column
SEARCH_FIELDS = {
    'prescription_no': 'prescription_no',
    'mobile': 'mobile_no',
    'name': 'name',
    'ref_no': 'reference_no',
}
SEARCH_LIMIT = 50

RIGHT_ALIASES = ('right', 'r', 're', 'od')
LEFT_ALIASES = ('left', 'l', 'le', 'os')


class ContactLensServiceError(Exception):
    pass


def generate_contact_lens_prescription_no():
    return unique_reference_no('CL', Prescription, 'prescription_no')


# ─────────────────────────────────────────────────────────────
# EYE SIDE VOCABULARY
# ─────────────────────────────────────────────────────────────

def eye_side_to_db(value):
    """UI ``RE``/``LE``/blank (or any alias) to stored ``Right``/``Left``/``Both``."""
    side = clean_text(value).lower()
    if side in RIGHT_ALIASES:
        return 'Right'
    if side in LEFT_ALIASES:
        return 'Left'
    return 'Both'


def eye_side_to_ui(value):
    side = clean_text(value).lower()
    if side in RIGHT_ALIASES:
        return 'RE'
    if side in LEFT_ALIASES:
        return 'LE'
    return ''


# ─────────────────────────────────────────────────────────────
# WRITE HELPERS
# ─────────────────────────────────────────────────────────────

def _pick(row, *keys, default=None):
    """First present key; the screen sends camelCase, stored rows are snake_case."""
    for key in keys:
        if key in row and row[key] not in (None, ''):
            return row[key]
    return default


def _write_header(contact_lens, header):
    for field in HEADER_TEXT_FIELDS:
        setattr(contact_lens, field, clean_text(header.get(field)))
    for field in HEADER_DATE_FIELDS:
        setattr(contact_lens, field, to_date(header.get(field)))
    contact_lens.delivery_time = to_time(header.get('delivery_time'))
    contact_lens.status = clean_text(header.get('status')) or 'Processing'
    contact_lens.save()


def _replace_eyes(contact_lens, eyes):
    contact_lens.eyes.all().delete()
    for eye in eyes or []:
        side = eye_side_to_db(_pick(eye, 'eye_side', 'side', default=''))
        if side == 'Both':
            logger.warning(f"Skipping eye row without a side on CL {contact_lens.id}")
            continue
        ContactLensEye.objects.create(
            contact_lens_prescription=contact_lens,
            eye_side=side,
            **{f: clean_text(_pick(eye, f, 'ax' if f == 'axis' else f, default='')) for f in EYE_FIELDS},
        )


def _item_fields(item, index):
    return {
        'item_index': index,
        'eye_side': eye_side_to_db(_pick(item, 'eye_side', 'side', default='')),
        'base_curve': clean_text(_pick(item, 'base_curve', 'bc', default='')),
        'power': clean_text(item.get('power')),
        'material': clean_text(item.get('material')),
        'dispose': clean_text(item.get('dispose')),
        'brand': clean_text(item.get('brand')),
        'diameter': clean_text(item.get('diameter')),
        'quantity': max(to_int(_pick(item, 'quantity', 'qty'), 1) or 1, 1),
        'rate': money(_pick(item, 'rate', default=0)),
        'discount_percent': money(clamp(
            to_decimal(_pick(item, 'discount_percent', 'discountPercent', default=0)), ZERO, HUNDRED
        )),
        'sph': clean_text(item.get('sph')),
        'cyl': clean_text(item.get('cyl')),
        'axis': clean_text(_pick(item, 'axis', 'ax', default='')),
        'lens_code': clean_text(_pick(item, 'lens_code', 'lensCode', default='')),
    }


def _replace_items(contact_lens, items):
    contact_lens.items.all().delete()
    rows = []
    for index, item in enumerate(items or []):
        # discount_amount and final_amount are derived in ContactLensItem.save()
        rows.append(ContactLensItem.objects.create(
            contact_lens_prescription=contact_lens,
            **_item_fields(item, index),
        ))
    return rows


def _upsert_payment(contact_lens, payment, items):
    payment = payment or {}
    summary = contact_lens_payment_summary(
        [{'quantity': i.quantity, 'rate': i.rate, 'discount_percent': i.discount_percent} for i in items],
        payment,
    )
    record, _ = ContactLensPayment.objects.get_or_create(contact_lens_prescription=contact_lens)
    record.payment_total = summary['payment_total'] if items else money(payment.get('payment_total'))
    record.estimate = summary['estimate']
    record.advance = summary['advance']
    record.cash_advance = money(payment.get('cash_advance'))
    record.card_upi_advance = money(payment.get('card_upi_advance'))
    record.cheque_advance = money(payment.get('cheque_advance'))
    record.discount_amount = summary['discount_amount']
    record.discount_percent = money(payment.get('discount_percent'))
    record.scheme_discount = bool(payment.get('scheme_discount'))
    record.payment_mode = clean_text(payment.get('payment_mode')) or 'Cash'
    record.payment_date = to_date(payment.get('payment_date')) or timezone.localdate()
    record.save()
    return record


# ─────────────────────────────────────────────────────────────
# READ HELPERS
# ─────────────────────────────────────────────────────────────

def _header_to_dict(contact_lens):
    data = {
        'id': contact_lens.id,
        'prescription_id': contact_lens.prescription_id,
        'status': contact_lens.status,
        'delivery_time': contact_lens.delivery_time.strftime('%H:%M') if contact_lens.delivery_time else '',
        'created_at': contact_lens.created_at.isoformat() if contact_lens.created_at else None,
    }
    for field in HEADER_TEXT_FIELDS:
        data[field] = getattr(contact_lens, field)
    for field in HEADER_DATE_FIELDS:
        value = getattr(contact_lens, field)
        data[field] = value.isoformat() if value else ''
    return data


def _customer_to_dict(prescription):
    return {
        'prescription_no': prescription.prescription_no,
        'name': prescription.name,
        'title': prescription.title,
        'gender': prescription.gender,
        'age': prescription.age,
        'mobile': prescription.mobile_no or '',
        'mobile_no': prescription.mobile_no or '',
        'email': prescription.email,
        'address': prescription.address,
        'city': prescription.city,
        'state': prescription.state,
        'pin_code': prescription.pin_code,
        'date': prescription.date.isoformat() if prescription.date else '',
        'source': prescription.source,
    }


def _eye_to_dict(eye):
    data = {'id': eye.id, 'eye_side': eye.eye_side}
    data.update({f: getattr(eye, f) for f in EYE_FIELDS})
    return data


def _item_to_dict(item):
    return {
        'id': item.id,
        'item_index': item.item_index,
        'eye_side': item.eye_side,
        'base_curve': item.base_curve,
        'power': item.power,
        'material': item.material,
        'dispose': item.dispose,
        'brand': item.brand,
        'diameter': item.diameter,
        'quantity': item.quantity,
        'rate': item.rate,
        'discount_percent': item.discount_percent,
        'discount_amount': item.discount_amount,
        'final_amount': item.final_amount,
        'sph': item.sph,
        'cyl': item.cyl,
        'axis': item.axis,
        'lens_code': item.lens_code,
    }


def _item_to_form(item, position):
    """Stored item to the card's row fields, repairing stale derived amounts."""
    qty = item.quantity or 1
    rate = item.rate or ZERO
    gross = to_decimal(qty) * rate
    discount_percent = to_decimal(item.discount_percent)
    discount_amount = to_decimal(item.discount_amount)
    final_amount = to_decimal(item.final_amount)

    if (final_amount == 0 or final_amount == gross) and discount_percent > 0:
        discount_amount = gross * discount_percent / 100
        final_amount = gross - discount_amount
    if discount_amount > 0 and discount_percent == 0 and gross > 0:
        discount_percent = discount_amount / gross * 100

    return {
        'side': eye_side_to_ui(item.eye_side),
        'si': position,
        'bc': item.base_curve,
        'power': item.power,
        'material': item.material,
        'dispose': item.dispose,
        'brand': item.brand,
        'diameter': item.diameter,
        'qty': qty,
        'rate': rate,
        'discountPercent': money(discount_percent),
        'discountAmount': money(discount_amount),
        'amount': money(final_amount),
        'sph': item.sph,
        'cyl': item.cyl,
        'ax': item.axis,
        'lensCode': item.lens_code,
    }


def _payment_to_dict(payment):
    if payment is None:
        return None
    return {
        'payment_total': payment.payment_total,
        'estimate': payment.estimate,
        'advance': payment.advance,
        'balance': payment.balance,
        'payment_mode': payment.payment_mode,
        'cash_advance': payment.cash_advance,
        'card_upi_advance': payment.card_upi_advance,
        'cheque_advance': payment.cheque_advance,
        'discount_amount': payment.discount_amount,
        'discount_percent': payment.discount_percent,
        'scheme_discount': payment.scheme_discount,
        'payment_date': payment.payment_date.isoformat() if payment.payment_date else '',
    }


def load_contact_lens(cl_id):
    return (
        ContactLensPrescription.objects
        .select_related('prescription', 'payment')
        .prefetch_related('eyes', 'items')
        .filter(id=cl_id)
        .first()
    )


def _payment_or_none(contact_lens):
    try:
        return contact_lens.payment
    except ContactLensPayment.DoesNotExist:
        return None


# ─────────────────────────────────────────────────────────────
# SERVICE
# ─────────────────────────────────────────────────────────────

class ContactLensService:

    @staticmethod
    def get_or_create_main_prescription(header):
        """
        Reuse the ContactLens-source prescription for this mobile number or
        create a new one. Returns ``(prescription, created)``.
        """
        mobile_no = blank_to_none(_pick(header, 'mobile', 'mobile_no', default=''))
        if mobile_no:
            existing = Prescription.objects.filter(
                mobile_no=mobile_no,
                source=Prescription.SOURCE_CONTACT_LENS,
            ).first()
            if existing is not None:
                logger.info(f"Reusing contact lens prescription {existing.prescription_no} for {mobile_no}")
                return existing, False

        prescription_no = clean_text(_pick(header, 'prescription_no', 'prescription_id', default=''))
        if prescription_no:
            taken = Prescription.objects.filter(prescription_no=prescription_no).first()
            if taken is not None and taken.source == Prescription.SOURCE_CONTACT_LENS:
                logger.info(f"Reusing contact lens prescription {prescription_no} by number")
                return taken, False
            if taken is not None:
                # picked from the eyeglass records; the contact lens record gets its own number
                logger.info(f"{prescription_no} is an eyeglass prescription, numbering a new contact lens record")
                prescription_no = ''
        prescription_no = prescription_no or generate_contact_lens_prescription_no()

        prescription = Prescription.objects.create(
            prescription_no=prescription_no,
            reference_no=prescription_no,
            name=clean_text(header.get('name')) or 'Customer',
            title=clean_text(header.get('title')),
            gender=clean_text(header.get('gender')),
            age=to_int(header.get('age')),
            mobile_no=mobile_no,
            email=clean_text(header.get('email')),
            address=clean_text(header.get('address')),
            city=clean_text(header.get('city')),
            state=clean_text(header.get('state')),
            pin_code=clean_text(_pick(header, 'pin', 'pin_code', default='')),
            customer_code=clean_text(header.get('customer_code')),
            birth_day=to_date(header.get('birth_day')),
            marriage_anniversary=to_date(header.get('marriage_anniversary')),
            phone_landline=clean_text(header.get('phone_landline')),
            prescribed_by=clean_text(header.get('prescribed_by')) or DEFAULT_PRESCRIBED_BY,
            date=timezone.localdate(),
            others=clean_text(header.get('remarks')),
            source=Prescription.SOURCE_CONTACT_LENS,
        )
        logger.info(f"Created contact lens prescription {prescription.prescription_no}")
        return prescription, True

    @staticmethod
    def save(data):
        header = data.get('prescription') or {}
        try:
            with transaction.atomic():
                prescription, _ = ContactLensService.get_or_create_main_prescription(header)

                existing = ContactLensPrescription.objects.filter(prescription=prescription).first()
                if existing is not None:
                    cl_id = existing.id
                else:
                    contact_lens = ContactLensPrescription(prescription=prescription)
                    _write_header(contact_lens, header)
                    _replace_eyes(contact_lens, data.get('eyes'))
                    items = _replace_items(contact_lens, data.get('items'))
                    _upsert_payment(contact_lens, data.get('payment'), items)
                    cl_id = None

            if cl_id is not None:
                return ContactLensService.update(cl_id, data)

            logger.info(f"Contact lens job {contact_lens.id} saved for {prescription.prescription_no}")
            return {
                'success': True,
                'message': 'Contact lens prescription saved successfully',
                'id': contact_lens.id,
                'prescription_no': prescription.prescription_no,
            }

        except DatabaseError:
            logger.error("Contact lens save failed", exc_info=True)
            return {'success': False, 'message': 'Failed to save contact lens prescription'}

    @staticmethod
    def update(cl_id, data):
        header = data.get('prescription') or {}
        try:
            with transaction.atomic():
                contact_lens = (
                    ContactLensPrescription.objects
                    .select_for_update()
                    .select_related('prescription')
                    .filter(id=cl_id)
                    .first()
                )
                if contact_lens is None:
                    raise ContactLensServiceError('Record not found')

                _write_header(contact_lens, header)
                _replace_eyes(contact_lens, data.get('eyes'))
                items = _replace_items(contact_lens, data.get('items'))
                _upsert_payment(contact_lens, data.get('payment'), items)

            logger.info(f"Contact lens job {cl_id} updated")
            return {
                'success': True,
                'message': 'Contact lens prescription updated successfully',
                'id': contact_lens.id,
                'prescription_no': contact_lens.prescription.prescription_no,
            }

        except ContactLensServiceError as e:
            logger.warning(f"Contact lens update rejected for {cl_id}: {e}")
            return {'success': False, 'message': str(e)}
        except DatabaseError:
            logger.error(f"Contact lens update failed for {cl_id}", exc_info=True)
            return {'success': False, 'message': 'Failed to update contact lens prescription'}

    @staticmethod
    def get(cl_id):
        contact_lens = load_contact_lens(cl_id)
        if contact_lens is None:
            return None
        prescription = _customer_to_dict(contact_lens.prescription)
        prescription.update(_header_to_dict(contact_lens))
        return {
            'prescription': prescription,
            'eyes': [_eye_to_dict(e) for e in contact_lens.eyes.all()],
            'items': [_item_to_dict(i) for i in contact_lens.items.all()],
            'payment': _payment_to_dict(_payment_or_none(contact_lens)),
        }

    @staticmethod
    def get_by_prescription_id(prescription_id):
        contact_lens = ContactLensPrescription.objects.filter(prescription_id=prescription_id).first()
        if contact_lens is None:
            return None
        return ContactLensService.get(contact_lens.id)

    @staticmethod
    def get_detailed(cl_id):
        """Form-shaped job: header merged with customer, UI item rows."""
        contact_lens = load_contact_lens(cl_id)
        if contact_lens is None:
            return {'success': False, 'message': 'Contact lens prescription not found'}

        prescription = _header_to_dict(contact_lens)
        prescription.update(_customer_to_dict(contact_lens.prescription))
        eyes = []
        for eye in contact_lens.eyes.all():
            row = _eye_to_dict(eye)
            row['side'] = eye_side_to_ui(eye.eye_side)
            eyes.append(row)

        return {
            'success': True,
            'message': 'Data retrieved successfully',
            'data': {
                'prescription': prescription,
                'eyes': eyes,
                'items': [
                    _item_to_form(item, position)
                    for position, item in enumerate(contact_lens.items.all(), start=1)
                ],
                'payment': _payment_to_dict(_payment_or_none(contact_lens)),
            },
        }

    @staticmethod
    def delete(cl_id):
        try:
            deleted, _ = ContactLensPrescription.objects.filter(id=cl_id).delete()
            if not deleted:
                return {'success': False, 'message': 'Contact lens prescription not found'}
            logger.info(f"Contact lens job {cl_id} deleted")
            return {'success': True, 'message': 'Contact lens prescription deleted successfully'}
        except DatabaseError:
            logger.error(f"Contact lens delete failed for {cl_id}", exc_info=True)
            return {'success': False, 'message': 'Failed to delete contact lens prescription'}

    @staticmethod
    def search_patients(field, value):
        value = clean_text(value)
        if not value:
            return {'success': False, 'message': 'Search value cannot be empty', 'data': []}
        column = SEARCH_FIELDS.get(field)
        if column is None:
            return {'success': False, 'message': f'Unsupported search field: {field}', 'data': []}

        try:
            matches = (
                Prescription.objects
                .filter(**{f'{column}__icontains': value})
                .select_related('contact_lens')
                .order_by('-created_at')[:SEARCH_LIMIT]
            )
            results = []
            for prescription in matches:
                row = _customer_to_dict(prescription)
                row['id'] = prescription.id
                row['prescribed_by'] = prescription.prescribed_by
                try:
                    row['contactLensData'] = _header_to_dict(prescription.contact_lens)
                except ContactLensPrescription.DoesNotExist:
                    row['contactLensData'] = None
                results.append(row)
        except DatabaseError:
            logger.error(f"Contact lens patient search failed on {field}", exc_info=True)
            return {'success': False, 'message': 'Search failed. Please try again.', 'data': []}

        return {
            'success': True,
            'message': f'Found {len(results)} matching prescriptions',
            'data': results,
        }
