from django.contrib import admin
from unfold.admin import ModelAdmin
from unfold.decorators import display

from .models import Order, OrderItem, OrderPayment


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("si", "item_type", "item_code", "item_name", "rate", "qty", "tax_percent",
              "discount_percent", "discount_amount", "amount")


class OrderPaymentInline(admin.StackedInline):
    model = OrderPayment
    can_delete = False
    readonly_fields = ("total_advance", "balance", "updated_at")


@admin.register(Order)
class OrderAdmin(ModelAdmin):
    list_display = ("order_no", "bill_no", "customer_name", "status_display", "order_date", "delivery_date", "balance")
    list_filter = ("status", "order_date", "delivery_date")
    search_fields = ("order_no", "bill_no", "prescription__name", "prescription__mobile_no")
    readonly_fields = ("created_at", "updated_at")
    list_select_related = ("prescription", "payment")
    date_hierarchy = "created_at"
    inlines = [OrderItemInline, OrderPaymentInline]

    @display(description="Customer")
    def customer_name(self, obj):
        return obj.prescription.name

    @display(
        description="Status",
        label={
            "Processing": "info",
            "Ordered": "warning",
            "Ready": "success",
            "Delivered": "success",
            "Cancelled": "danger",
        },
    )
    def status_display(self, obj):
        return obj.status

    @display(description="Balance")
    def balance(self, obj):
        payment = getattr(obj, "payment", None)
        return payment.balance if payment else "-"
