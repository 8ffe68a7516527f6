# Generated manually for the subscriptions app

import uuid
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='SubscriptionPlan',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('tier', models.CharField(choices=[('free', 'Free'), ('premium', 'Premium')], max_length=20, unique=True)),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True, null=True)),
                ('price', models.PositiveIntegerField(default=0)),
                ('billing_period', models.CharField(choices=[('monthly', 'Monthly'), ('yearly', 'Yearly')], default='monthly', max_length=10)),
                ('invoice_limit', models.PositiveIntegerField(default=10)),
                ('duration', models.PositiveIntegerField(default=30, help_text='Days; 0 means forever')),
                ('features', models.JSONField(blank=True, default=list)),
                ('template_count', models.PositiveIntegerField(default=1)),
                ('has_logo', models.BooleanField(default=False)),
                ('has_signature', models.BooleanField(default=False)),
                ('has_custom_colors', models.BooleanField(default=False)),
                ('history_limit', models.PositiveIntegerField(default=10)),
                ('history_type', models.CharField(choices=[('count', 'Most recent N invoices'), ('days', 'Invoices from the last N days')], default='count', max_length=10)),
                ('has_dashboard_totals', models.BooleanField(default=False)),
                ('export_qualities', models.JSONField(blank=True, default=list)),
                ('has_monthly_report', models.BooleanField(default=False)),
                ('has_customer_book', models.BooleanField(default=False)),
                ('is_active', models.BooleanField(default=True)),
                ('is_popular', models.BooleanField(default=False)),
                ('sort_order', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'subscription_plans',
                'ordering': ['sort_order', 'price'],
            },
        ),
        migrations.CreateModel(
            name='UserSubscription',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('tier', models.CharField(choices=[('free', 'Free'), ('premium', 'Premium')], default='free', max_length=20)),
                ('invoice_limit', models.PositiveIntegerField(default=10)),
                ('current_month_count', models.PositiveIntegerField(default=0)),
                ('month_year', models.CharField(max_length=10)),
                ('subscription_start_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('subscription_end_date', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='subscription', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'user_subscriptions',
                'indexes': [models.Index(fields=['tier'], name='user_subs_tier_idx')],
            },
        ),
        migrations.CreateModel(
            name='InvoiceUsage',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('month_year', models.CharField(max_length=10)),
                ('invoice_count', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='invoice_usage', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'invoice_usage',
                'ordering': ['-month_year'],
                'unique_together': {('user', 'month_year')},
            },
        ),
        migrations.CreateModel(
            name='PaymentTransaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('mayar_invoice_id', models.CharField(max_length=255, unique=True)),
                ('mayar_transaction_id', models.CharField(blank=True, max_length=255, null=True)),
                ('amount', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('tier', models.CharField(choices=[('free', 'Free'), ('premium', 'Premium')], max_length=20)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('completed', 'Completed'), ('failed', 'Failed'), ('expired', 'Expired')], default='pending', max_length=20)),
                ('payment_method', models.CharField(blank=True, max_length=50, null=True)),
                ('payment_url', models.URLField(blank=True, max_length=500)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('webhook_verified_at', models.DateTimeField(blank=True, null=True)),
                ('verified_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payment_transactions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'payment_transactions',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', 'status'], name='payments_user_status_idx'),
                    models.Index(fields=['created_at'], name='payments_created_idx'),
                ],
            },
        ),
    ]
