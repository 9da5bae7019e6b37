# contact_lens/models.py
from django.db import models

from billing.calculations import balance as compute_balance, contact_lens_item_amounts
from prescriptions.models import Prescription


class ContactLensPrescription(models.Model):
    """Contact-lens job header, one per main prescription"""
    STATUS_CHOICES = [
        ('Processing', 'Processing'),
        ('Ordered', 'Ordered'),
        ('Ready', 'Ready'),
        ('Delivered', 'Delivered'),
        ('Cancelled', 'Cancelled'),
    ]

    prescription = models.OneToOneField(
        Prescription, on_delete=models.CASCADE, related_name='contact_lens'
    )
    booked_by = models.CharField(max_length=100, blank=True)
    delivery_date = models.DateField(null=True, blank=True)
    delivery_time = models.TimeField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='Processing')
    retest_date = models.DateField(null=True, blank=True)
    expiry_date = models.DateField(null=True, blank=True)
    remarks = models.TextField(blank=True)
    reference_no = models.CharField(max_length=50, blank=True, db_index=True)
    customer_code = models.CharField(max_length=50, blank=True)
    birth_day = models.DateField(null=True, blank=True)
    marriage_anniversary = models.DateField(null=True, blank=True)
    pin = models.CharField(max_length=20, blank=True)
    phone_landline = models.CharField(max_length=20, blank=True)
    prescribed_by = models.CharField(max_length=200, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'contact_lens_prescriptions'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', '-created_at'], name='cl_status_created_idx'),
        ]

    def __str__(self):
        return f"CL {self.prescription.prescription_no}"


class ContactLensEye(models.Model):
    EYE_SIDES = [
        ('Right', 'Right'),
        ('Left', 'Left'),
    ]

    contact_lens_prescription = models.ForeignKey(
        ContactLensPrescription, on_delete=models.CASCADE, related_name='eyes'
    )
    eye_side = models.CharField(max_length=5, choices=EYE_SIDES)
    sph = models.CharField(max_length=10, blank=True)
    cyl = models.CharField(max_length=10, blank=True)
    axis = models.CharField(max_length=10, blank=True)
    add_power = models.CharField(max_length=10, blank=True)
    vn = models.CharField(max_length=10, blank=True)
    rpd = models.CharField(max_length=10, blank=True)
    lpd = models.CharField(max_length=10, blank=True)
    ipd = models.CharField(max_length=10, blank=True)

    class Meta:
        db_table = 'contact_lens_eyes'
        ordering = ['-eye_side']

    def __str__(self):
        return f"{self.eye_side} eye"


class ContactLensItem(models.Model):
    """Lens line item; discount_amount and final_amount are derived on save"""
    EYE_SIDES = [
        ('Right', 'Right'),
        ('Left', 'Left'),
        ('Both', 'Both'),
    ]

    contact_lens_prescription = models.ForeignKey(
        ContactLensPrescription, on_delete=models.CASCADE, related_name='items'
    )
    item_index = models.PositiveIntegerField(default=0)
    eye_side = models.CharField(max_length=5, choices=EYE_SIDES, default='Both')
    base_curve = models.CharField(max_length=20, blank=True)
    power = models.CharField(max_length=20, blank=True)
    material = models.CharField(max_length=100, blank=True)
    dispose = models.CharField(max_length=50, blank=True)
    brand = models.CharField(max_length=100, blank=True)
    diameter = models.CharField(max_length=20, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    rate = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    discount_percent = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0, editable=False)
    final_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0, editable=False)
    sph = models.CharField(max_length=10, blank=True)
    cyl = models.CharField(max_length=10, blank=True)
    axis = models.CharField(max_length=10, blank=True)
    lens_code = models.CharField(max_length=50, blank=True)

    class Meta:
        db_table = 'contact_lens_items'
        ordering = ['item_index', 'id']

    def __str__(self):
        return f"{self.brand or 'Lens'} x{self.quantity}"

    def save(self, *args, **kwargs):
        amounts = contact_lens_item_amounts(self.quantity, self.rate, self.discount_percent)
        self.discount_amount = amounts['discount_amount']
        self.final_amount = amounts['final_amount']
        super().save(*args, **kwargs)


class ContactLensPayment(models.Model):
    """Payment for a contact-lens job; balance is derived on save"""
    PAYMENT_MODES = [
        ('Cash', 'Cash'),
        ('Card', 'Card'),
        ('UPI', 'UPI'),
        ('Cheque', 'Cheque'),
    ]

    contact_lens_prescription = models.OneToOneField(
        ContactLensPrescription, on_delete=models.CASCADE, related_name='payment'
    )
    payment_total = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    estimate = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    advance = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    balance = models.DecimalField(max_digits=10, decimal_places=2, default=0, editable=False)
    payment_mode = models.CharField(max_length=20, choices=PAYMENT_MODES, blank=True)
    cash_advance = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    card_upi_advance = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    cheque_advance = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    discount_percent = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    scheme_discount = models.BooleanField(default=False)
    payment_date = models.DateField(null=True, blank=True)

    class Meta:
        db_table = 'contact_lens_payments'

    def __str__(self):
        return f"Payment for CL {self.contact_lens_prescription_id}"

    def save(self, *args, **kwargs):
        self.balance = compute_balance(self.estimate, self.discount_amount, self.advance)
        super().save(*args, **kwargs)
