# orders/models.py
from django.db import models

from billing.calculations import ZERO, money
from prescriptions.models import Prescription


class Order(models.Model):
    """Spectacle order card"""
    ORDER_STATUS = [
        ('Processing', 'Processing'),
        ('Ordered', 'Ordered'),
        ('Ready', 'Ready'),
        ('Delivered', 'Delivered'),
        ('Cancelled', 'Cancelled'),
    ]

    prescription = models.ForeignKey(Prescription, on_delete=models.CASCADE, related_name='orders')

    # Order Identifiers
    order_no = models.CharField(max_length=50, unique=True, db_index=True)
    bill_no = models.CharField(max_length=50, blank=True, db_index=True)

    order_date = models.DateField(null=True, blank=True)
    delivery_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=ORDER_STATUS, default='Processing', db_index=True)
    booked_by = models.CharField(max_length=100, blank=True)
    remarks = models.TextField(blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['prescription', '-created_at'], name='orders_rx_created_idx'),
            models.Index(fields=['status', '-created_at'], name='orders_status_created_idx'),
        ]

    def __str__(self):
        return self.order_no


class OrderItem(models.Model):
    """Frame / lens line on an order card"""
    ITEM_TYPES = [
        ('frame', 'Frame'),
        ('lens', 'Lens'),
        ('other', 'Other'),
    ]

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    si = models.PositiveIntegerField(default=1)
    item_type = models.CharField(max_length=10, choices=ITEM_TYPES, default='frame')
    item_code = models.CharField(max_length=50, blank=True)
    item_name = models.CharField(max_length=255, blank=True)
    rate = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    qty = models.PositiveIntegerField(default=1)
    amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    tax_percent = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    discount_percent = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    # Lens details
    brand_name = models.CharField(max_length=100, blank=True)
    index = models.CharField(max_length=20, blank=True)
    coating = models.CharField(max_length=100, blank=True)

    class Meta:
        db_table = 'order_items'
        ordering = ['si', 'id']
        indexes = [
            models.Index(fields=['order'], name='order_items_order_idx'),
            models.Index(fields=['item_code'], name='order_items_code_idx'),
        ]

    def __str__(self):
        return f"{self.item_name or self.item_code} x{self.qty}"


class OrderPayment(models.Model):
    """Order totals; total_advance and balance are derived on save"""
    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name='payment')
    payment_estimate = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    final_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    advance_cash = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    advance_card_upi = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    advance_other = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    schedule_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_advance = models.DecimalField(max_digits=10, decimal_places=2, default=0, editable=False)
    balance = models.DecimalField(max_digits=10, decimal_places=2, default=0, editable=False)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'order_payments'

    def __str__(self):
        return f"Payment for {self.order_id}"

    def save(self, *args, **kwargs):
        self.total_advance = money(
            (self.advance_cash or ZERO) + (self.advance_card_upi or ZERO) + (self.advance_other or ZERO)
        )
        self.balance = money(max(ZERO, (self.final_amount or ZERO) - self.total_advance))
        super().save(*args, **kwargs)
