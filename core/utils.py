# core/utils.py
"""Parsing and numbering helpers shared by the entry screens."""

import json
import random
import string
from datetime import datetime
from decimal import Decimal, InvalidOperation

from django.contrib.auth.decorators import login_required, user_passes_test
from django.utils import timezone


# ─────────────────────────────────────────────────────────────
# FORM VALUE PARSING
# ─────────────────────────────────────────────────────────────

def to_int(value, default=None):
    if value is None or value == '':
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        try:
            return int(Decimal(str(value).strip()))
        except (InvalidOperation, ValueError, OverflowError):
            return default


def to_date(value):
    if not value:
        return None
    if hasattr(value, 'year'):
        return value
    value = str(value).strip()
    for fmt in ('%Y-%m-%d', '%d-%m-%Y', '%d/%m/%Y'):
        try:
            return datetime.strptime(value[:10], fmt).date()
        except ValueError:
            continue
    return None


def to_time(value):
    if not value:
        return None
    if hasattr(value, 'hour'):
        return value
    for fmt in ('%H:%M', '%H:%M:%S'):
        try:
            return datetime.strptime(str(value).strip(), fmt).time()
        except ValueError:
            continue
    return None


def clean_text(value):
    """Strip a text input; blank becomes empty string."""
    if value is None:
        return ''
    return str(value).strip()


def blank_to_none(value):
    value = clean_text(value)
    return value or None


# ─────────────────────────────────────────────────────────────
# NUMBERING
# ─────────────────────────────────────────────────────────────

def generate_reference_no(prefix):
    """PREFIX-YYYYMMDD-NNN, the shape used on printed cards."""
    datestamp = timezone.localdate().strftime('%Y%m%d')
    random_str = ''.join(random.choices(string.digits, k=3))
    return f"{prefix}-{datestamp}-{random_str}"


def unique_reference_no(prefix, model, field, attempts=25):
    for _ in range(attempts):
        candidate = generate_reference_no(prefix)
        if not model.objects.filter(**{field: candidate}).exists():
            return candidate
    # A busy day exhausted the three-digit space; widen the suffix.
    suffix = ''.join(random.choices(string.ascii_uppercase + string.digits, k=6))
    return f"{prefix}-{timezone.localdate().strftime('%Y%m%d')}-{suffix}"


# ─────────────────────────────────────────────────────────────
# ACCESS
# ─────────────────────────────────────────────────────────────

def is_staff_user(user):
    return user.is_authenticated and (user.is_staff or user.is_superuser)


def staff_required(view_func):
    return login_required(user_passes_test(is_staff_user)(view_func))


# ─────────────────────────────────────────────────────────────
# REQUESTS
# ─────────────────────────────────────────────────────────────

def json_body(request):
    """Decoded JSON object from the request body, or None when unreadable."""
    try:
        data = json.loads(request.body or b'{}')
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return data if isinstance(data, dict) else None
