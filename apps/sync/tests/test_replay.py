import pytest

from apps.invoices.models import Invoice
from apps.stores.models import Store
from apps.stores.services import get_default_store, get_primary_contact, InvalidStoreDataError
from apps.sync.services import (
    apply_item,
    sync_local_data,
    UnsupportedSyncItemError,
)


# =============================================================================
# Settings
# =============================================================================

@pytest.mark.django_db
class TestApplySettings:

    def test_creates_store_when_missing(self, user):
        apply_item(
            user=user,
            action='upsert',
            entity_type='settings',
            entity_id='settings',
            data={
                'name': 'Toko Mulia',
                'address': 'Jl. Asia Afrika 8',
                'brand_color': '#123456',
                'admin_name': 'Siti',
                'admin_title': 'Owner',
            },
        )

        store = get_default_store(user=user)
        assert store.name == 'Toko Mulia'
        assert store.brand_color == '#123456'
        contact = get_primary_contact(store=store)
        assert contact.name == 'Siti'
        assert contact.title == 'Owner'

    def test_updates_default_store(self, user, store):
        apply_item(
            user=user,
            action='update',
            entity_type='settings',
            entity_id='settings',
            data={'tagline': 'Emas terpercaya', 'unknown_field': 'ignored'},
        )

        store.refresh_from_db()
        assert store.tagline == 'Emas terpercaya'
        assert Store.objects.filter(user=user).count() == 1

    def test_without_admin_name_keeps_contacts(self, user, store):
        apply_item(user=user, action='update', entity_type='settings', entity_id='settings',
                   data={'tagline': 'Baru'})

        assert get_primary_contact(store=store) is None

    def test_invalid_brand_color_rejected(self, user, store):
        with pytest.raises(InvalidStoreDataError, match='brand_color'):
            apply_item(user=user, action='update', entity_type='settings', entity_id='settings',
                       data={'tagline': 'Baru', 'brand_color': 'blue'})

        store.refresh_from_db()
        assert store.brand_color == '#10b981'
        assert store.tagline is None

    def test_non_numeric_padding_rejected(self, user, store):
        with pytest.raises(InvalidStoreDataError, match='invoice_number_padding'):
            apply_item(user=user, action='update', entity_type='settings', entity_id='settings',
                       data={'invoice_number_padding': 'three'})

    def test_failed_contact_rolls_back_store(self, user, store):
        with pytest.raises(UnsupportedSyncItemError):
            apply_item(user=user, action='update', entity_type='settings', entity_id='settings',
                       data={'tagline': 'Baru', 'admin_name': 'Siti', 'admin_title': ['Owner']})

        store.refresh_from_db()
        assert store.tagline is None
        assert get_primary_contact(store=store) is None

    def test_settings_must_be_object(self, user, store):
        with pytest.raises(UnsupportedSyncItemError):
            apply_item(user=user, action='update', entity_type='settings', entity_id='settings',
                       data=['tagline'])

    def test_delete_soft_deletes_default_store(self, user, store):
        apply_item(user=user, action='delete', entity_type='settings', entity_id='settings')

        store.refresh_from_db()
        assert store.is_active is False


# =============================================================================
# Invoices
# =============================================================================

@pytest.mark.django_db
class TestApplyInvoice:

    def test_create(self, user, store, invoice_data, invoice_id):
        apply_item(user=user, action='create', entity_type='invoice',
                   entity_id=invoice_id, data=invoice_data)

        invoice = Invoice.objects.get(id=invoice_id)
        assert invoice.invoice_number == 'INV-OFF-001'
        assert str(invoice.total) == '310000.00'
        assert invoice.items.count() == 1

    def test_upsert_updates_existing(self, user, store, invoice_data, invoice_id):
        apply_item(user=user, action='create', entity_type='invoice',
                   entity_id=invoice_id, data=invoice_data)
        invoice_data['customer_name'] = 'Budi S.'
        invoice_data['items'] = [{'description': 'Gelang', 'quantity': 1, 'price': '500000'}]

        apply_item(user=user, action='upsert', entity_type='invoice',
                   entity_id=invoice_id, data=invoice_data)

        invoice = Invoice.objects.get(id=invoice_id)
        assert invoice.customer_name == 'Budi S.'
        assert str(invoice.subtotal) == '500000.00'
        assert Invoice.objects.filter(user=user).count() == 1

    def test_delete(self, user, store, invoice_data, invoice_id):
        apply_item(user=user, action='create', entity_type='invoice',
                   entity_id=invoice_id, data=invoice_data)

        apply_item(user=user, action='delete', entity_type='invoice', entity_id=invoice_id)

        assert not Invoice.objects.filter(id=invoice_id).exists()

    def test_delete_missing_invoice_succeeds(self, user, invoice_id):
        apply_item(user=user, action='delete', entity_type='invoice', entity_id=invoice_id)

    def test_invalid_invoice_id(self, user):
        with pytest.raises(UnsupportedSyncItemError):
            apply_item(user=user, action='delete', entity_type='invoice', entity_id='not-a-uuid')

    def test_malformed_customer_id(self, user, store, invoice_data, invoice_id):
        invoice_data['customer_id'] = 'pelanggan-1'

        with pytest.raises(UnsupportedSyncItemError, match='customer_id'):
            apply_item(user=user, action='create', entity_type='invoice',
                       entity_id=invoice_id, data=invoice_data)

        assert not Invoice.objects.filter(user=user).exists()

    def test_items_must_be_a_list(self, user, store, invoice_data, invoice_id):
        invoice_data['items'] = 'Cincin emas'

        with pytest.raises(UnsupportedSyncItemError, match='items'):
            apply_item(user=user, action='create', entity_type='invoice',
                       entity_id=invoice_id, data=invoice_data)

    def test_fractional_quantity(self, user, store, invoice_data, invoice_id):
        invoice_data['items'][0]['quantity'] = '1.5'

        with pytest.raises(UnsupportedSyncItemError, match='items.0.quantity'):
            apply_item(user=user, action='create', entity_type='invoice',
                       entity_id=invoice_id, data=invoice_data)

    def test_invoice_must_be_object(self, user, invoice_id):
        with pytest.raises(UnsupportedSyncItemError):
            apply_item(user=user, action='create', entity_type='invoice',
                       entity_id=invoice_id, data='INV-OFF-001')

    def test_standalone_invoice_item_is_ignored(self, user):
        apply_item(user=user, action='create', entity_type='invoice_item',
                   entity_id='item-1', data={'description': 'Cincin'})

        assert Invoice.objects.count() == 0


# =============================================================================
# Post-signup import
# =============================================================================

@pytest.mark.django_db
class TestSyncLocalData:

    def test_imports_settings_and_invoices(self, user, invoice_data):
        second = dict(invoice_data, invoice_number='INV-OFF-002')

        result = sync_local_data(
            user=user,
            settings={'name': 'Toko Lama', 'admin_name': 'Budi'},
            invoices=[invoice_data, second],
        )

        assert result == {'settings_synced': True, 'invoices_synced': 2, 'errors': []}
        assert get_default_store(user=user).name == 'Toko Lama'

    def test_bad_invoice_does_not_abort_batch(self, user, invoice_data):
        broken = dict(invoice_data, invoice_number='INV-OFF-002', items=[])

        result = sync_local_data(user=user, invoices=[broken, invoice_data])

        assert result['settings_synced'] is False
        assert result['invoices_synced'] == 1
        assert len(result['errors']) == 1
        assert result['errors'][0].startswith('Invoice INV-OFF-002:')
        assert Invoice.objects.filter(user=user).count() == 1

    def test_malformed_entries_are_reported(self, user, invoice_data):
        result = sync_local_data(
            user=user,
            settings={'name': 'Toko Lama', 'brand_color': 'blue'},
            invoices=['INV-OFF-009', invoice_data],
        )

        assert result['settings_synced'] is False
        assert result['invoices_synced'] == 1
        assert result['errors'][0].startswith('Settings:')
        assert result['errors'][1].startswith('Invoice #1:')
