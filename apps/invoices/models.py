# ==========================================
# apps/invoices/models.py
# ==========================================

from decimal import Decimal

from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
import uuid


class InvoiceStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    PENDING = 'pending', 'Pending sync'
    SYNCED = 'synced', 'Synced'


class Invoice(models.Model):
    """
    Invoice issued by a user, optionally from one of their stores.

    Customer details are copied onto the invoice so it survives edits to or
    deletion of the customer book entry.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='invoices')
    store = models.ForeignKey(
        'stores.Store',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoices'
    )
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoices'
    )

    invoice_number = models.CharField(max_length=50)
    invoice_date = models.DateField()

    # Customer snapshot
    customer_name = models.CharField(max_length=255)
    customer_email = models.EmailField(blank=True, null=True)
    customer_phone = models.CharField(max_length=20, blank=True, null=True)
    customer_address = models.TextField(blank=True, null=True)
    customer_status = models.CharField(max_length=20, blank=True, null=True)

    # Amounts
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    shipping_cost = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(0)]
    )
    tax_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))

    note = models.TextField(blank=True, null=True)
    status = models.CharField(
        max_length=10,
        choices=InvoiceStatus.choices,
        default=InvoiceStatus.DRAFT
    )
    synced_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'invoices'
        ordering = ['-invoice_date', '-created_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'invoice_number'], name='invoices_user_number_unique'),
        ]
        indexes = [
            models.Index(fields=['user', 'invoice_date'], name='invoices_user_date_idx'),
            models.Index(fields=['store', 'invoice_date'], name='invoices_store_date_idx'),
            models.Index(fields=['status'], name='invoices_status_idx'),
        ]

    def __str__(self):
        return f"{self.invoice_number} - {self.customer_name}"

    @property
    def is_buyback(self):
        """True when every item is a buyback item."""
        items = list(self.items.all())
        return bool(items) and all(item.is_buyback for item in items)


class InvoiceItem(models.Model):
    """
    Line of an invoice.

    Regular items are priced as quantity x price; buyback items as
    gram x rate, where ``custom_buyback_rate`` overrides ``buyback_rate``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')
    description = models.CharField(max_length=500)
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(0)]
    )
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    position = models.PositiveIntegerField(default=0)

    # Buyback
    is_buyback = models.BooleanField(default=False)
    gram = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)
    buyback_rate = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    custom_buyback_rate = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'invoice_items'
        ordering = ['position', 'created_at']

    def __str__(self):
        return self.description
