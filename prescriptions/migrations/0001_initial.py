from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Prescription',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('prescription_no', models.CharField(db_index=True, max_length=50, unique=True)),
                ('reference_no', models.CharField(blank=True, db_index=True, max_length=50)),
                ('class_type', models.CharField(blank=True, max_length=50)),
                ('prescribed_by', models.CharField(blank=True, max_length=200)),
                ('date', models.DateField(blank=True, null=True)),
                ('title', models.CharField(blank=True, max_length=10)),
                ('name', models.CharField(db_index=True, max_length=200)),
                ('gender', models.CharField(blank=True, choices=[('Male', 'Male'), ('Female', 'Female'), ('Other', 'Other')], max_length=10)),
                ('age', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('customer_code', models.CharField(blank=True, max_length=50)),
                ('birth_day', models.DateField(blank=True, null=True)),
                ('marriage_anniversary', models.DateField(blank=True, null=True)),
                ('address', models.TextField(blank=True)),
                ('city', models.CharField(blank=True, max_length=100)),
                ('state', models.CharField(blank=True, max_length=100)),
                ('pin_code', models.CharField(blank=True, max_length=20)),
                ('phone_landline', models.CharField(blank=True, max_length=20)),
                ('mobile_no', models.CharField(blank=True, db_index=True, max_length=20, null=True)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('ipd', models.CharField(blank=True, max_length=10)),
                ('retest_after', models.DateField(blank=True, null=True)),
                ('others', models.TextField(blank=True)),
                ('balance_lens', models.BooleanField(default=False)),
                ('source', models.CharField(choices=[('Prescription', 'Prescription'), ('ContactLens', 'Contact Lens')], default='Prescription', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'prescriptions',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['source', '-created_at'], name='prescriptions_source_idx')],
                'constraints': [models.UniqueConstraint(fields=('mobile_no', 'source'), name='unique_prescription_mobile_per_source')],
            },
        ),
        migrations.CreateModel(
            name='EyePrescription',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('eye_type', models.CharField(choices=[('right', 'Right'), ('left', 'Left')], max_length=5)),
                ('vision_type', models.CharField(choices=[('dv', 'Distance Vision'), ('nv', 'Near Vision')], max_length=2)),
                ('sph', models.CharField(blank=True, max_length=10)),
                ('cyl', models.CharField(blank=True, max_length=10)),
                ('ax', models.CharField(blank=True, max_length=10)),
                ('add_power', models.CharField(blank=True, max_length=10)),
                ('vn', models.CharField(blank=True, max_length=10)),
                ('rpd', models.CharField(blank=True, max_length=10)),
                ('lpd', models.CharField(blank=True, max_length=10)),
                ('prescription', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='eye_prescriptions', to='prescriptions.prescription')),
            ],
            options={
                'db_table': 'eye_prescriptions',
                'ordering': ['eye_type', 'vision_type'],
                'constraints': [models.UniqueConstraint(fields=('prescription', 'eye_type', 'vision_type'), name='unique_eye_vision_per_prescription')],
            },
        ),
        migrations.CreateModel(
            name='PrescriptionRemarks',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('for_constant_use', models.BooleanField(default=False)),
                ('for_distance_vision_only', models.BooleanField(default=False)),
                ('for_near_vision_only', models.BooleanField(default=False)),
                ('separate_glasses', models.BooleanField(default=False)),
                ('bi_focal_lenses', models.BooleanField(default=False)),
                ('progressive_lenses', models.BooleanField(default=False)),
                ('anti_reflection_lenses', models.BooleanField(default=False)),
                ('anti_radiation_lenses', models.BooleanField(default=False)),
                ('under_corrected', models.BooleanField(default=False)),
                ('prescription', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='remarks', to='prescriptions.prescription')),
            ],
            options={
                'db_table': 'prescription_remarks',
                'verbose_name_plural': 'prescription remarks',
            },
        ),
    ]
