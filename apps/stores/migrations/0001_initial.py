# Generated manually for the stores app

import uuid
import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Store',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('slug', models.SlugField(max_length=280, unique=True)),
                ('is_active', models.BooleanField(default=True)),
                ('logo', models.TextField(blank=True, help_text='URL or data URI', null=True)),
                ('address', models.TextField(blank=True)),
                ('whatsapp', models.CharField(blank=True, max_length=20)),
                ('phone', models.CharField(blank=True, max_length=20, null=True)),
                ('email', models.EmailField(blank=True, max_length=254, null=True)),
                ('website', models.CharField(blank=True, max_length=255, null=True)),
                ('store_description', models.TextField(blank=True, null=True)),
                ('tagline', models.CharField(blank=True, max_length=255, null=True)),
                ('store_number', models.CharField(blank=True, max_length=50, null=True)),
                ('payment_method', models.TextField(blank=True, null=True)),
                ('brand_color', models.CharField(default='#10b981', max_length=7, validators=[django.core.validators.RegexValidator(message='Color must be a hex value like #10b981', regex='^#[0-9a-fA-F]{6}$')])),
                ('invoice_prefix', models.CharField(default='INV', max_length=10)),
                ('store_code', models.CharField(blank=True, max_length=10)),
                ('invoice_number_format', models.CharField(blank=True, max_length=100, null=True)),
                ('next_invoice_number', models.PositiveIntegerField(default=1)),
                ('invoice_number_padding', models.PositiveSmallIntegerField(default=3, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(10)])),
                ('reset_counter_daily', models.BooleanField(default=False)),
                ('daily_invoice_date', models.DateField(blank=True, null=True)),
                ('daily_invoice_counter', models.PositiveIntegerField(default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stores', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'stores',
                'ordering': ['created_at'],
                'indexes': [models.Index(fields=['user', 'is_active'], name='stores_user_active_idx')],
            },
        ),
        migrations.CreateModel(
            name='StoreContact',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('title', models.CharField(blank=True, max_length=100, null=True)),
                ('signature', models.TextField(blank=True, help_text='Signature image as URL or data URI', null=True)),
                ('is_primary', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='contacts', to='stores.store')),
            ],
            options={
                'db_table': 'store_contacts',
                'ordering': ['-is_primary', 'created_at'],
                'constraints': [models.UniqueConstraint(condition=models.Q(('is_primary', True)), fields=('store',), name='store_contacts_one_primary')],
            },
        ),
        migrations.CreateModel(
            name='UserPreferences',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('preferred_language', models.CharField(default='id', max_length=5)),
                ('timezone', models.CharField(default='Asia/Jakarta', max_length=50)),
                ('date_format', models.CharField(default='DD/MM/YYYY', max_length=20)),
                ('currency', models.CharField(default='IDR', max_length=3)),
                ('tax_enabled', models.BooleanField(default=False)),
                ('tax_percentage', models.DecimalField(decimal_places=2, default=0, max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('export_quality', models.CharField(choices=[('standard', 'Standard'), ('high', 'High'), ('print-ready', 'Print ready')], default='standard', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('default_store', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='stores.store')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='preferences', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'user_preferences',
                'verbose_name_plural': 'user preferences',
            },
        ),
    ]
