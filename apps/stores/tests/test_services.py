import pytest
from datetime import date

from apps.stores.models import StoreContact
from apps.stores.services import (
    create_contact,
    create_store,
    delete_contact,
    delete_store,
    format_store_invoice_number,
    get_default_store,
    get_or_create_preferences,
    get_store,
    next_store_invoice_number,
    reset_invoice_counter,
    set_default_store,
    set_primary_contact,
    update_preferences,
    update_primary_contact,
    update_store,
    InvalidPreferenceError,
    InvalidStoreDataError,
    StoreAccessDenied,
    StoreNotFoundError,
)


# =============================================================================
# Store management
# =============================================================================

@pytest.mark.django_db
class TestStoreManagement:
    """Tests for store CRUD and the default store."""

    def test_first_store_becomes_default(self, user, store):
        assert get_or_create_preferences(user=user).default_store == store
        assert store.slug == 'toko-emas-sejahtera'

    def test_slug_deduplicated(self, user, store):
        second = create_store(user=user, name='Toko Emas Sejahtera')

        assert second.slug == 'toko-emas-sejahtera-2'
        assert get_or_create_preferences(user=user).default_store == store

    def test_update_renames_slug(self, user, store):
        updated = update_store(store_id=store.id, user=user, name='Toko Baru', brand_color='#123456')

        assert updated.slug == 'toko-baru'
        assert updated.brand_color == '#123456'

    def test_invalid_brand_color_rejected(self, user, store):
        with pytest.raises(InvalidStoreDataError, match='brand_color'):
            update_store(store_id=store.id, user=user, brand_color='blue')

        store.refresh_from_db()
        assert store.brand_color == '#10b981'

    def test_create_validates_fields(self, user):
        with pytest.raises(InvalidStoreDataError, match='invoice_number_padding'):
            create_store(user=user, name='Cabang Dua', invoice_number_padding=20)

        assert get_default_store(user=user) is None

    def test_other_user_denied(self, other_user, store):
        with pytest.raises(StoreAccessDenied) as exc_info:
            get_store(store_id=store.id, user=other_user)

        assert str(exc_info.value) == 'Unauthorized: Store does not belong to authenticated user'

    def test_soft_delete_clears_default(self, user, store):
        delete_store(store_id=store.id, user=user)

        store.refresh_from_db()
        assert store.is_active is False
        assert get_or_create_preferences(user=user).default_store is None
        with pytest.raises(StoreNotFoundError):
            get_store(store_id=store.id, user=user)

    def test_default_falls_back_to_oldest_active(self, user, store):
        second = create_store(user=user, name='Cabang Dua')
        prefs = get_or_create_preferences(user=user)
        prefs.default_store = None
        prefs.save()

        assert get_default_store(user=user) == store

        set_default_store(store_id=second.id, user=user)
        assert get_default_store(user=user) == second

    def test_no_store(self, user):
        assert get_default_store(user=user) is None


# =============================================================================
# Contacts
# =============================================================================

@pytest.mark.django_db
class TestContacts:
    """Tests for the one-primary-contact rule."""

    def test_first_contact_is_primary(self, user, store):
        contact = create_contact(store_id=store.id, user=user, name='Budi')

        assert contact.is_primary is True

    def test_set_primary_demotes_others(self, user, store):
        first = create_contact(store_id=store.id, user=user, name='Budi')
        second = create_contact(store_id=store.id, user=user, name='Siti')

        set_primary_contact(contact_id=second.id, user=user)

        first.refresh_from_db()
        assert first.is_primary is False
        assert StoreContact.objects.filter(store=store, is_primary=True).count() == 1

    def test_deleting_primary_promotes_oldest(self, user, store):
        first = create_contact(store_id=store.id, user=user, name='Budi')
        second = create_contact(store_id=store.id, user=user, name='Siti')

        delete_contact(contact_id=first.id, user=user)

        second.refresh_from_db()
        assert second.is_primary is True

    def test_update_primary_contact_creates_default(self, store):
        contact = update_primary_contact(store=store, title='Owner')

        assert contact.name == 'Store Owner'
        assert contact.is_primary is True

    def test_update_primary_contact_updates_existing(self, user, store):
        existing = create_contact(store_id=store.id, user=user, name='Budi')

        contact = update_primary_contact(store=store, name='Budi Santoso', signature='data:image/png;base64,xx')

        assert contact.id == existing.id
        assert contact.name == 'Budi Santoso'


# =============================================================================
# Preferences
# =============================================================================

@pytest.mark.django_db
class TestPreferences:

    def test_defaults(self, user):
        prefs = get_or_create_preferences(user=user)

        assert prefs.currency == 'IDR'
        assert prefs.preferred_language == 'id'
        assert prefs.export_quality == 'standard'

    def test_free_user_cannot_pick_high_quality(self, user):
        with pytest.raises(InvalidPreferenceError):
            update_preferences(user=user, export_quality='high')

    def test_premium_user_can_pick_print_ready(self, premium_user):
        prefs = update_preferences(user=premium_user, export_quality='print-ready', tax_enabled=True)

        assert prefs.export_quality == 'print-ready'
        assert prefs.tax_enabled is True

    def test_default_store_must_be_own(self, user, other_store):
        with pytest.raises(StoreNotFoundError):
            update_preferences(user=user, default_store=other_store)


# =============================================================================
# Numbering
# =============================================================================

@pytest.mark.django_db
class TestStoreNumbering:
    """Tests for store-based invoice numbers."""

    def test_running_counter(self, store):
        first = next_store_invoice_number(store=store, invoice_date=date(2025, 3, 7))
        second = next_store_invoice_number(store=store, invoice_date=date(2025, 3, 8))

        assert first == 'INV-JKT-070325-001'
        assert second == 'INV-JKT-080325-002'

    def test_store_code_omitted_when_blank(self, store):
        store.store_code = ''
        store.invoice_prefix = 'TKO'
        store.invoice_number_padding = 4

        assert format_store_invoice_number(store, date(2025, 1, 2), 12) == 'TKO-020125-0012'

    def test_daily_reset(self, store):
        store.reset_counter_daily = True
        store.save()

        day_one = [next_store_invoice_number(store=store, invoice_date=date(2025, 3, 7)) for _ in range(2)]
        day_two = next_store_invoice_number(store=store, invoice_date=date(2025, 3, 8))

        assert day_one == ['INV-JKT-070325-001', 'INV-JKT-070325-002']
        assert day_two == 'INV-JKT-080325-001'

    def test_reset_counter(self, store):
        next_store_invoice_number(store=store, invoice_date=date(2025, 3, 7))

        store = reset_invoice_counter(store=store)

        assert store.next_invoice_number == 1
