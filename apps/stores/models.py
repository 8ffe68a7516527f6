# ==========================================
# apps/stores/models.py
# ==========================================

from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator, RegexValidator
import uuid


HEX_COLOR_VALIDATOR = RegexValidator(
    regex=r'^#[0-9a-fA-F]{6}$',
    message='Color must be a hex value like #10b981',
)


class ExportQuality(models.TextChoices):
    STANDARD = 'standard', 'Standard'
    HIGH = 'high', 'High'
    PRINT_READY = 'print-ready', 'Print ready'


class Store(models.Model):
    """Business profile an owner issues invoices from."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='stores')
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=280, unique=True)
    is_active = models.BooleanField(default=True)

    # Branding and contact
    logo = models.TextField(blank=True, null=True, help_text='URL or data URI')
    address = models.TextField(blank=True)
    whatsapp = models.CharField(max_length=20, blank=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    website = models.CharField(max_length=255, blank=True, null=True)
    store_description = models.TextField(blank=True, null=True)
    tagline = models.CharField(max_length=255, blank=True, null=True)
    store_number = models.CharField(max_length=50, blank=True, null=True)
    payment_method = models.TextField(blank=True, null=True)
    brand_color = models.CharField(max_length=7, default='#10b981', validators=[HEX_COLOR_VALIDATOR])

    # Invoice numbering
    invoice_prefix = models.CharField(max_length=10, default='INV')
    store_code = models.CharField(max_length=10, blank=True)
    invoice_number_format = models.CharField(max_length=100, blank=True, null=True)
    next_invoice_number = models.PositiveIntegerField(default=1)
    invoice_number_padding = models.PositiveSmallIntegerField(
        default=3,
        validators=[MinValueValidator(1), MaxValueValidator(10)]
    )
    reset_counter_daily = models.BooleanField(default=False)
    daily_invoice_date = models.DateField(null=True, blank=True)
    daily_invoice_counter = models.PositiveIntegerField(default=1)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'stores'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['user', 'is_active'], name='stores_user_active_idx'),
        ]

    def __str__(self):
        return self.name

    def get_primary_contact(self):
        return self.contacts.filter(is_primary=True).first()


class StoreContact(models.Model):
    """Person who signs invoices for a store."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    store = models.ForeignKey(Store, on_delete=models.CASCADE, related_name='contacts')
    name = models.CharField(max_length=255)
    title = models.CharField(max_length=100, blank=True, null=True)
    signature = models.TextField(blank=True, null=True, help_text='Signature image as URL or data URI')
    is_primary = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'store_contacts'
        ordering = ['-is_primary', 'created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['store'],
                condition=models.Q(is_primary=True),
                name='store_contacts_one_primary',
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.store})"


class UserPreferences(models.Model):
    """Per-user display, tax and export settings."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField('accounts.User', on_delete=models.CASCADE, related_name='preferences')
    preferred_language = models.CharField(max_length=5, default='id')
    timezone = models.CharField(max_length=50, default='Asia/Jakarta')
    date_format = models.CharField(max_length=20, default='DD/MM/YYYY')
    currency = models.CharField(max_length=3, default='IDR')
    default_store = models.ForeignKey(
        Store,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    tax_enabled = models.BooleanField(default=False)
    tax_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    export_quality = models.CharField(
        max_length=20,
        choices=ExportQuality.choices,
        default=ExportQuality.STANDARD
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'user_preferences'
        verbose_name_plural = 'user preferences'

    def __str__(self):
        return f"Preferences of {self.user}"
