from django.db.models import Sum
from django.shortcuts import render
from django.utils import timezone

from contact_lens.models import ContactLensPayment, ContactLensPrescription
from orders.models import Order, OrderPayment
from prescriptions.models import Prescription
from .utils import staff_required


@staff_required
def dashboard(request):
    """Today's counts, outstanding balances and the latest order cards"""
    today = timezone.localdate()

    stats = {
        'prescriptions_today': Prescription.objects.filter(
            source=Prescription.SOURCE_PRESCRIPTION, created_at__date=today
        ).count(),
        'orders_today': Order.objects.filter(created_at__date=today).count(),
        'contact_lens_today': ContactLensPrescription.objects.filter(created_at__date=today).count(),
        'orders_pending': Order.objects.exclude(status__in=['Delivered', 'Cancelled']).count(),
        'order_balance_due': OrderPayment.objects.aggregate(total=Sum('balance'))['total'] or 0,
        'contact_lens_balance_due': ContactLensPayment.objects.aggregate(total=Sum('balance'))['total'] or 0,
    }

    recent_orders = (
        Order.objects
        .select_related('prescription', 'payment')
        .order_by('-created_at')[:10]
    )
    recent_contact_lens = (
        ContactLensPrescription.objects
        .select_related('prescription', 'payment')
        .order_by('-created_at')[:5]
    )

    return render(request, 'core/dashboard.html', {
        'stats': stats,
        'recent_orders': recent_orders,
        'recent_contact_lens': recent_contact_lens,
        'today': today,
    })
