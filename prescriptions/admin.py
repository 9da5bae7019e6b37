from django.contrib import admin
from unfold.admin import ModelAdmin
from unfold.decorators import display

from .models import EyePrescription, Prescription, PrescriptionRemarks


class EyePrescriptionInline(admin.TabularInline):
    model = EyePrescription
    extra = 0
    max_num = 4


class PrescriptionRemarksInline(admin.StackedInline):
    model = PrescriptionRemarks
    can_delete = False


@admin.register(Prescription)
class PrescriptionAdmin(ModelAdmin):
    list_display = ("prescription_no", "name", "mobile_no", "source_display", "date", "created_at")
    list_filter = ("source", "gender", "date")
    search_fields = ("prescription_no", "reference_no", "name", "mobile_no", "phone_landline")
    readonly_fields = ("created_at", "updated_at")
    inlines = [EyePrescriptionInline, PrescriptionRemarksInline]

    @display(description="Source", label=True)
    def source_display(self, obj):
        return obj.get_source_display()
