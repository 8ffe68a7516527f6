# ==========================================
# apps/customers/models.py
# ==========================================

from django.db import models
import uuid


class CustomerStatus(models.TextChoices):
    CUSTOMER = 'Customer', 'Customer'
    RESELLER = 'Reseller', 'Reseller'
    DISTRIBUTOR = 'Distributor', 'Distributor'


class Customer(models.Model):
    """Saved buyer in a store's customer book."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    store = models.ForeignKey('stores.Store', on_delete=models.CASCADE, related_name='customers')
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20)
    address = models.TextField()
    email = models.EmailField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    status = models.CharField(
        max_length=20,
        choices=CustomerStatus.choices,
        default=CustomerStatus.CUSTOMER
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'customers'
        ordering = ['name']
        indexes = [
            models.Index(fields=['store', 'is_active'], name='customers_store_active_idx'),
            models.Index(fields=['name'], name='customers_name_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.status})"
