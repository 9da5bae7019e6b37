from django.contrib import admin
from unfold.admin import ModelAdmin
from unfold.decorators import display

from .models import ContactLensEye, ContactLensItem, ContactLensPayment, ContactLensPrescription


class ContactLensEyeInline(admin.TabularInline):
    model = ContactLensEye
    extra = 0
    max_num = 2


class ContactLensItemInline(admin.TabularInline):
    model = ContactLensItem
    extra = 0
    readonly_fields = ("discount_amount", "final_amount")


class ContactLensPaymentInline(admin.StackedInline):
    model = ContactLensPayment
    can_delete = False
    readonly_fields = ("balance",)


@admin.register(ContactLensPrescription)
class ContactLensPrescriptionAdmin(ModelAdmin):
    list_display = ("prescription_no", "customer_name", "mobile_no", "status_display", "delivery_date", "created_at")
    list_filter = ("status", "delivery_date")
    search_fields = ("prescription__prescription_no", "prescription__name", "prescription__mobile_no", "reference_no")
    readonly_fields = ("created_at", "updated_at")
    list_select_related = ("prescription",)
    inlines = [ContactLensEyeInline, ContactLensItemInline, ContactLensPaymentInline]

    @display(description="Prescription No")
    def prescription_no(self, obj):
        return obj.prescription.prescription_no

    @display(description="Customer")
    def customer_name(self, obj):
        return obj.prescription.name

    @display(description="Mobile")
    def mobile_no(self, obj):
        return obj.prescription.mobile_no

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
