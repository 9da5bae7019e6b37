# prescriptions/models.py
from django.db import models


class Prescription(models.Model):
    """Customer record with eyeglass prescription header"""
    SOURCE_PRESCRIPTION = 'Prescription'
    SOURCE_CONTACT_LENS = 'ContactLens'
    SOURCES = [
        (SOURCE_PRESCRIPTION, 'Prescription'),
        (SOURCE_CONTACT_LENS, 'Contact Lens'),
    ]

    GENDERS = [
        ('Male', 'Male'),
        ('Female', 'Female'),
        ('Other', 'Other'),
    ]

    prescription_no = models.CharField(max_length=50, unique=True, db_index=True)
    reference_no = models.CharField(max_length=50, blank=True, db_index=True)
    class_type = models.CharField(max_length=50, blank=True)
    prescribed_by = models.CharField(max_length=200, blank=True)
    date = models.DateField(null=True, blank=True)

    # Customer
    title = models.CharField(max_length=10, blank=True)
    name = models.CharField(max_length=200, db_index=True)
    gender = models.CharField(max_length=10, choices=GENDERS, blank=True)
    age = models.PositiveSmallIntegerField(null=True, blank=True)
    customer_code = models.CharField(max_length=50, blank=True)
    birth_day = models.DateField(null=True, blank=True)
    marriage_anniversary = models.DateField(null=True, blank=True)

    # Contact
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    pin_code = models.CharField(max_length=20, blank=True)
    phone_landline = models.CharField(max_length=20, blank=True)
    mobile_no = models.CharField(max_length=20, null=True, blank=True, db_index=True)
    email = models.EmailField(blank=True)

    ipd = models.CharField(max_length=10, blank=True)
    retest_after = models.DateField(null=True, blank=True)
    others = models.TextField(blank=True)
    balance_lens = models.BooleanField(default=False)

    source = models.CharField(max_length=20, choices=SOURCES, default=SOURCE_PRESCRIPTION)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'prescriptions'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['mobile_no', 'source'],
                name='unique_prescription_mobile_per_source',
            ),
        ]
        indexes = [
            models.Index(fields=['source', '-created_at'], name='prescriptions_source_idx'),
        ]

    def __str__(self):
        return f"{self.prescription_no} - {self.name}"

    def eye(self, eye_type, vision_type):
        for row in self.eye_prescriptions.all():
            if row.eye_type == eye_type and row.vision_type == vision_type:
                return row
        return None


class EyePrescription(models.Model):
    """One measurement row: eye (right/left) x vision (distance/near)"""
    EYE_TYPES = [
        ('right', 'Right'),
        ('left', 'Left'),
    ]
    VISION_TYPES = [
        ('dv', 'Distance Vision'),
        ('nv', 'Near Vision'),
    ]

    prescription = models.ForeignKey(Prescription, on_delete=models.CASCADE, related_name='eye_prescriptions')
    eye_type = models.CharField(max_length=5, choices=EYE_TYPES)
    vision_type = models.CharField(max_length=2, choices=VISION_TYPES)

    # Optical notation is kept as entered: "+1.25", "PL", "-0.75"
    sph = models.CharField(max_length=10, blank=True)
    cyl = models.CharField(max_length=10, blank=True)
    ax = models.CharField(max_length=10, blank=True)
    add_power = models.CharField(max_length=10, blank=True)
    vn = models.CharField(max_length=10, blank=True)
    rpd = models.CharField(max_length=10, blank=True)
    lpd = models.CharField(max_length=10, blank=True)

    class Meta:
        db_table = 'eye_prescriptions'
        ordering = ['eye_type', 'vision_type']
        constraints = [
            models.UniqueConstraint(
                fields=['prescription', 'eye_type', 'vision_type'],
                name='unique_eye_vision_per_prescription',
            ),
        ]

    def __str__(self):
        return f"{self.prescription_id} {self.eye_type}/{self.vision_type}"


class PrescriptionRemarks(models.Model):
    """Lens recommendation flags printed under the prescription"""
    FLAGS = [
        'for_constant_use',
        'for_distance_vision_only',
        'for_near_vision_only',
        'separate_glasses',
        'bi_focal_lenses',
        'progressive_lenses',
        'anti_reflection_lenses',
        'anti_radiation_lenses',
        'under_corrected',
    ]

    prescription = models.OneToOneField(Prescription, on_delete=models.CASCADE, related_name='remarks')
    for_constant_use = models.BooleanField(default=False)
    for_distance_vision_only = models.BooleanField(default=False)
    for_near_vision_only = models.BooleanField(default=False)
    separate_glasses = models.BooleanField(default=False)
    bi_focal_lenses = models.BooleanField(default=False)
    progressive_lenses = models.BooleanField(default=False)
    anti_reflection_lenses = models.BooleanField(default=False)
    anti_radiation_lenses = models.BooleanField(default=False)
    under_corrected = models.BooleanField(default=False)

    class Meta:
        db_table = 'prescription_remarks'
        verbose_name_plural = 'prescription remarks'

    def __str__(self):
        return f"Remarks for {self.prescription_id}"

    def active_labels(self):
        return [
            flag.replace('_', ' ').title()
            for flag in self.FLAGS if getattr(self, flag)
        ]
