# prescriptions/services.py
"""
Prescription entry: save with per-eye rows and remark flags, lookup and
search for the entry screen's suggestion list.
"""

import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from core.utils import blank_to_none, clean_text, to_date, to_int, unique_reference_no
from .models import EyePrescription, Prescription, PrescriptionRemarks

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ('prescription_no', 'reference_no', 'name', 'mobile_no')
SEARCH_LIMIT = 10

EYE_FIELDS = ('sph', 'cyl', 'ax', 'add_power', 'vn', 'rpd', 'lpd')

HEADER_TEXT_FIELDS = (
    'reference_no', 'class_type', 'prescribed_by', 'title', 'name', 'gender',
    'customer_code', 'address', 'city', 'state', 'pin_code', 'phone_landline',
    'email', 'ipd', 'others',
)
HEADER_DATE_FIELDS = ('date', 'birth_day', 'marriage_anniversary', 'retest_after')


class PrescriptionServiceError(Exception):
    pass


def generate_prescription_no():
    return unique_reference_no('RX', Prescription, 'prescription_no')


def validate_eye_values(eyes):
    """Range checks on the measurement grid."""
    errors = []
    warnings = []
    for eye_type in ('right', 'left'):
        for vision_type in ('dv', 'nv'):
            row = (eyes.get(eye_type) or {}).get(vision_type) or {}
            label = f"{'RE' if eye_type == 'right' else 'LE'} {vision_type.upper()}"

            sph = _as_float(row.get('sph'))
            if sph is not None:
                if abs(sph) > 20:
                    errors.append(f'{label} sphere value seems unusually high')
                elif abs(sph) > 10:
                    warnings.append(f'{label} sphere is very high - consider high-index lenses')

            cyl = _as_float(row.get('cyl'))
            if cyl is not None and abs(cyl) > 6:
                errors.append(f'{label} cylinder value seems unusually high')

            axis = _as_float(row.get('ax'))
            if axis is not None and (axis < 0 or axis > 180):
                errors.append(f'{label} axis must be between 0 and 180')

    return {
        'valid': len(errors) == 0,
        'errors': errors,
        'warnings': warnings,
    }


def _as_float(value):
    value = clean_text(value)
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        # "PL", "plano" and similar are valid entries with no numeric range
        return None


def format_prescription_details(prescription):
    """One-line summary of the distance readings, e.g. ``RE: Sph: -1.00 Cyl: -0.50 | LE: ...``."""
    details = []
    for eye_type, label in (('right', 'RE'), ('left', 'LE')):
        row = prescription.eye(eye_type, 'dv')
        if row is None or not (row.sph or row.cyl or row.ax):
            continue
        parts = [f'{label}:']
        if row.sph:
            parts.append(f'Sph: {row.sph}')
        if row.cyl:
            parts.append(f'Cyl: {row.cyl}')
        if row.ax:
            parts.append(f'Axis: {row.ax}')
        if row.add_power:
            parts.append(f'Add: {row.add_power}')
        if row.vn:
            parts.append(f'VA: {row.vn}')
        details.append(' '.join(parts))

    right, left = prescription.eye('right', 'dv'), prescription.eye('left', 'dv')
    rpd = right.rpd if right else ''
    lpd = left.lpd if left else ''
    if rpd or lpd:
        details.append(f"PD: R {rpd or '-'} / L {lpd or '-'}")
    return ' | '.join(details)


def prescription_to_dict(prescription):
    """Form-shaped representation used by the entry screen and its API."""
    data = {
        'id': prescription.id,
        'prescription_no': prescription.prescription_no,
        'age': prescription.age,
        'mobile_no': prescription.mobile_no or '',
        'balance_lens': prescription.balance_lens,
        'source': prescription.source,
        'created_at': prescription.created_at.isoformat() if prescription.created_at else None,
    }
    for field in HEADER_TEXT_FIELDS:
        data[field] = getattr(prescription, field)
    for field in HEADER_DATE_FIELDS:
        value = getattr(prescription, field)
        data[field] = value.isoformat() if value else ''

    eyes = {'right': {}, 'left': {}}
    for eye_type in ('right', 'left'):
        for vision_type in ('dv', 'nv'):
            row = prescription.eye(eye_type, vision_type)
            eyes[eye_type][vision_type] = {
                f: (getattr(row, f) if row else '') for f in EYE_FIELDS
            }
    data['eyes'] = eyes

    try:
        remarks = prescription.remarks
    except PrescriptionRemarks.DoesNotExist:
        remarks = None
    data['remarks'] = {
        flag: bool(remarks and getattr(remarks, flag)) for flag in PrescriptionRemarks.FLAGS
    }
    return data


class PrescriptionService:
    """Create, update, look up and remove eyeglass prescriptions."""

    @staticmethod
    def save(data, prescription_id=None):
        try:
            name = clean_text(data.get('name'))
            if not name:
                raise PrescriptionServiceError('Customer name is required')

            eyes = data.get('eyes') or {}
            check = validate_eye_values(eyes)
            if not check['valid']:
                raise PrescriptionServiceError('; '.join(check['errors']))

            mobile_no = blank_to_none(data.get('mobile_no'))
            merged = False

            with transaction.atomic():
                if prescription_id:
                    pk = to_int(prescription_id)
                    prescription = None
                    if pk is not None:
                        prescription = Prescription.objects.select_for_update().filter(id=pk).first()
                    if prescription is None:
                        raise PrescriptionServiceError('Prescription not found')
                else:
                    prescription = None
                    if mobile_no:
                        prescription = Prescription.objects.filter(
                            mobile_no=mobile_no,
                            source=Prescription.SOURCE_PRESCRIPTION,
                        ).first()
                        merged = prescription is not None
                    if prescription is None:
                        prescription = Prescription(
                            prescription_no=(
                                clean_text(data.get('prescription_no')) or generate_prescription_no()
                            ),
                            source=Prescription.SOURCE_PRESCRIPTION,
                        )
                        if Prescription.objects.filter(prescription_no=prescription.prescription_no).exists():
                            raise PrescriptionServiceError(
                                f'Prescription number {prescription.prescription_no} is already in use'
                            )

                for field in HEADER_TEXT_FIELDS:
                    setattr(prescription, field, clean_text(data.get(field)))
                for field in HEADER_DATE_FIELDS:
                    setattr(prescription, field, to_date(data.get(field)))
                if prescription.date is None:
                    prescription.date = timezone.localdate()
                prescription.name = name
                prescription.mobile_no = mobile_no
                prescription.age = to_int(data.get('age'))
                prescription.balance_lens = bool(data.get('balance_lens'))
                prescription.save()

                for eye_type in ('right', 'left'):
                    for vision_type in ('dv', 'nv'):
                        row = (eyes.get(eye_type) or {}).get(vision_type) or {}
                        EyePrescription.objects.update_or_create(
                            prescription=prescription,
                            eye_type=eye_type,
                            vision_type=vision_type,
                            defaults={f: clean_text(row.get(f)) for f in EYE_FIELDS},
                        )

                remarks = data.get('remarks') or {}
                PrescriptionRemarks.objects.update_or_create(
                    prescription=prescription,
                    defaults={flag: bool(remarks.get(flag)) for flag in PrescriptionRemarks.FLAGS},
                )

            logger.info(
                f"Prescription {prescription.prescription_no} saved "
                f"({'merged by mobile' if merged else 'direct'})"
            )
            return {
                'success': True,
                'message': 'Prescription saved successfully',
                'id': prescription.id,
                'prescription_no': prescription.prescription_no,
                'merged': merged,
                'warnings': check['warnings'],
            }

        except PrescriptionServiceError as e:
            logger.warning(f"Prescription save rejected: {e}")
            return {'success': False, 'message': str(e)}
        except DatabaseError:
            logger.error("Prescription save failed", exc_info=True)
            return {'success': False, 'message': 'Failed to save prescription'}

    @staticmethod
    def search(field, query):
        if field not in SEARCH_FIELDS:
            return []
        query = clean_text(query)
        if not query:
            return []
        try:
            matches = (
                Prescription.objects
                .filter(**{f'{field}__icontains': query})
                .select_related('remarks')
                .prefetch_related('eye_prescriptions')
                .order_by('-created_at')[:SEARCH_LIMIT]
            )
            return [prescription_to_dict(p) for p in matches]
        except DatabaseError:
            logger.error(f"Prescription search failed on {field}", exc_info=True)
            return []

    @staticmethod
    def get(prescription_id):
        prescription = (
            Prescription.objects
            .select_related('remarks')
            .prefetch_related('eye_prescriptions')
            .filter(id=prescription_id)
            .first()
        )
        if prescription is None:
            return None
        return prescription_to_dict(prescription)

    @staticmethod
    def delete(prescription_id):
        try:
            prescription = Prescription.objects.filter(id=prescription_id).first()
            if prescription is None:
                raise PrescriptionServiceError('Prescription not found')
            number = prescription.prescription_no
            prescription.delete()
            logger.info(f"Prescription {number} deleted")
            return {'success': True, 'message': 'Prescription deleted successfully'}
        except PrescriptionServiceError as e:
            return {'success': False, 'message': str(e)}
        except DatabaseError:
            logger.error(f"Prescription delete failed for {prescription_id}", exc_info=True)
            return {'success': False, 'message': 'Failed to delete prescription'}
