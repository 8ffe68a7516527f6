"""
Customers app services layer.

Premium-only customer book scoped to the user's stores.
"""

from .exceptions import (
    CustomersServiceError,
    CustomerNotFoundError,
)

from .customer_management import (
    list_customers,
    get_customer,
    create_customer,
    update_customer,
    delete_customer,
)


__all__ = [
    # Exceptions
    'CustomersServiceError',
    'CustomerNotFoundError',

    # Customer Management
    'list_customers',
    'get_customer',
    'create_customer',
    'update_customer',
    'delete_customer',
]
