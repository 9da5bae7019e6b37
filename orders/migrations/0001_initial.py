from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('prescriptions', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_no', models.CharField(db_index=True, max_length=50, unique=True)),
                ('bill_no', models.CharField(blank=True, db_index=True, max_length=50)),
                ('order_date', models.DateField(blank=True, null=True)),
                ('delivery_date', models.DateField(blank=True, null=True)),
                ('status', models.CharField(choices=[('Processing', 'Processing'), ('Ordered', 'Ordered'), ('Ready', 'Ready'), ('Delivered', 'Delivered'), ('Cancelled', 'Cancelled')], db_index=True, default='Processing', max_length=20)),
                ('booked_by', models.CharField(blank=True, max_length=100)),
                ('remarks', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('prescription', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='orders', to='prescriptions.prescription')),
            ],
            options={
                'db_table': 'orders',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['prescription', '-created_at'], name='orders_rx_created_idx'),
                    models.Index(fields=['status', '-created_at'], name='orders_status_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('si', models.PositiveIntegerField(default=1)),
                ('item_type', models.CharField(choices=[('frame', 'Frame'), ('lens', 'Lens'), ('other', 'Other')], default='frame', max_length=10)),
                ('item_code', models.CharField(blank=True, max_length=50)),
                ('item_name', models.CharField(blank=True, max_length=255)),
                ('rate', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('qty', models.PositiveIntegerField(default=1)),
                ('amount', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('tax_percent', models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ('discount_percent', models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ('discount_amount', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('brand_name', models.CharField(blank=True, max_length=100)),
                ('index', models.CharField(blank=True, max_length=20)),
                ('coating', models.CharField(blank=True, max_length=100)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='orders.order')),
            ],
            options={
                'db_table': 'order_items',
                'ordering': ['si', 'id'],
                'indexes': [
                    models.Index(fields=['order'], name='order_items_order_idx'),
                    models.Index(fields=['item_code'], name='order_items_code_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderPayment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('payment_estimate', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('tax_amount', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('discount_amount', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('final_amount', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('advance_cash', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('advance_card_upi', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('advance_other', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('schedule_amount', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('total_advance', models.DecimalField(decimal_places=2, default=0, editable=False, max_digits=10)),
                ('balance', models.DecimalField(decimal_places=2, default=0, editable=False, max_digits=10)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('order', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='payment', to='orders.order')),
            ],
            options={
                'db_table': 'order_payments',
            },
        ),
    ]
