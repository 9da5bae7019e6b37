from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('prescriptions', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ContactLensPrescription',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('booked_by', models.CharField(blank=True, max_length=100)),
                ('delivery_date', models.DateField(blank=True, null=True)),
                ('delivery_time', models.TimeField(blank=True, null=True)),
                ('status', models.CharField(choices=[('Processing', 'Processing'), ('Ordered', 'Ordered'), ('Ready', 'Ready'), ('Delivered', 'Delivered'), ('Cancelled', 'Cancelled')], default='Processing', max_length=20)),
                ('retest_date', models.DateField(blank=True, null=True)),
                ('expiry_date', models.DateField(blank=True, null=True)),
                ('remarks', models.TextField(blank=True)),
                ('reference_no', models.CharField(blank=True, db_index=True, max_length=50)),
                ('customer_code', models.CharField(blank=True, max_length=50)),
                ('birth_day', models.DateField(blank=True, null=True)),
                ('marriage_anniversary', models.DateField(blank=True, null=True)),
                ('pin', models.CharField(blank=True, max_length=20)),
                ('phone_landline', models.CharField(blank=True, max_length=20)),
                ('prescribed_by', models.CharField(blank=True, max_length=200)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('prescription', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='contact_lens', to='prescriptions.prescription')),
            ],
            options={
                'db_table': 'contact_lens_prescriptions',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['status', '-created_at'], name='cl_status_created_idx')],
            },
        ),
        migrations.CreateModel(
            name='ContactLensEye',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('eye_side', models.CharField(choices=[('Right', 'Right'), ('Left', 'Left')], max_length=5)),
                ('sph', models.CharField(blank=True, max_length=10)),
                ('cyl', models.CharField(blank=True, max_length=10)),
                ('axis', models.CharField(blank=True, max_length=10)),
                ('add_power', models.CharField(blank=True, max_length=10)),
                ('vn', models.CharField(blank=True, max_length=10)),
                ('rpd', models.CharField(blank=True, max_length=10)),
                ('lpd', models.CharField(blank=True, max_length=10)),
                ('ipd', models.CharField(blank=True, max_length=10)),
                ('contact_lens_prescription', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='eyes', to='contact_lens.contactlensprescription')),
            ],
            options={
                'db_table': 'contact_lens_eyes',
                'ordering': ['-eye_side'],
            },
        ),
        migrations.CreateModel(
            name='ContactLensItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_index', models.PositiveIntegerField(default=0)),
                ('eye_side', models.CharField(choices=[('Right', 'Right'), ('Left', 'Left'), ('Both', 'Both')], default='Both', max_length=5)),
                ('base_curve', models.CharField(blank=True, max_length=20)),
                ('power', models.CharField(blank=True, max_length=20)),
                ('material', models.CharField(blank=True, max_length=100)),
                ('dispose', models.CharField(blank=True, max_length=50)),
                ('brand', models.CharField(blank=True, max_length=100)),
                ('diameter', models.CharField(blank=True, max_length=20)),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('rate', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('discount_percent', models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ('discount_amount', models.DecimalField(decimal_places=2, default=0, editable=False, max_digits=10)),
                ('final_amount', models.DecimalField(decimal_places=2, default=0, editable=False, max_digits=10)),
                ('sph', models.CharField(blank=True, max_length=10)),
                ('cyl', models.CharField(blank=True, max_length=10)),
                ('axis', models.CharField(blank=True, max_length=10)),
                ('lens_code', models.CharField(blank=True, max_length=50)),
                ('contact_lens_prescription', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='contact_lens.contactlensprescription')),
            ],
            options={
                'db_table': 'contact_lens_items',
                'ordering': ['item_index', 'id'],
            },
        ),
        migrations.CreateModel(
            name='ContactLensPayment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('payment_total', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('estimate', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('advance', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('balance', models.DecimalField(decimal_places=2, default=0, editable=False, max_digits=10)),
                ('payment_mode', models.CharField(blank=True, choices=[('Cash', 'Cash'), ('Card', 'Card'), ('UPI', 'UPI'), ('Cheque', 'Cheque')], max_length=20)),
                ('cash_advance', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('card_upi_advance', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('cheque_advance', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('discount_amount', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('discount_percent', models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ('scheme_discount', models.BooleanField(default=False)),
                ('payment_date', models.DateField(blank=True, null=True)),
                ('contact_lens_prescription', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='payment', to='contact_lens.contactlensprescription')),
            ],
            options={
                'db_table': 'contact_lens_payments',
            },
        ),
    ]
