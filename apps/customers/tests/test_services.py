import pytest

from apps.customers.models import Customer
from apps.customers.services import (
    create_customer,
    delete_customer,
    get_customer,
    list_customers,
    update_customer,
    CustomerNotFoundError,
)
from apps.stores.services import create_store, StoreAccessDenied
from apps.subscriptions.exceptions import FeatureNotAvailable
from apps.subscriptions.services import upgrade_to_tier


@pytest.mark.django_db
class TestCustomerManagement:
    """Tests for the customer book service."""

    def test_list_is_ordered_by_name(self, user, store, customer):
        create_customer(user=user, store_id=store.id, name='Ani', phone='0811111111', address='Jl. Mawar 3')

        names = [c.name for c in list_customers(user=user, store_id=store.id)]

        assert names == ['Ani', 'Budi Santoso']

    def test_search_matches_phone_and_email(self, user, store, customer):
        assert list(list_customers(user=user, store_id=store.id, search='0812')) == [customer]
        assert list(list_customers(user=user, store_id=store.id, search='BUDI@')) == [customer]
        assert list(list_customers(user=user, store_id=store.id, search='zzz')) == []

    def test_soft_delete_hides_customer(self, user, store, customer):
        delete_customer(customer_id=customer.id, user=user)

        assert Customer.objects.filter(id=customer.id).exists()
        assert list(list_customers(user=user, store_id=store.id)) == []
        with pytest.raises(CustomerNotFoundError):
            get_customer(customer_id=customer.id, user=user)

    def test_update(self, user, customer):
        updated = update_customer(customer_id=customer.id, user=user, status='Reseller', notes='VIP')

        assert updated.status == 'Reseller'
        assert updated.notes == 'VIP'

    def test_free_tier_is_rejected(self, free_user, free_store):
        with pytest.raises(FeatureNotAvailable):
            list_customers(user=free_user, store_id=free_store.id)

    def test_other_users_store_is_rejected(self, user, free_user):
        foreign_store = create_store(user=free_user, name='Bukan Milikmu')

        with pytest.raises(StoreAccessDenied):
            create_customer(user=user, store_id=foreign_store.id, name='X', phone='0811111111', address='Jl. A 1')

    def test_customer_of_other_user_not_found(self, free_user, customer):
        upgrade_to_tier(user=free_user, tier='premium')

        with pytest.raises(CustomerNotFoundError):
            get_customer(customer_id=customer.id, user=free_user)
