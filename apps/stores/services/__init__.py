"""
Stores app services layer.

Store profiles, their signing contacts, per-user preferences and store-based
invoice numbering.
"""

from .exceptions import (
    StoresServiceError,
    StoreNotFoundError,
    StoreAccessDenied,
    ContactNotFoundError,
    InvalidPreferenceError,
    InvalidStoreDataError,
)

from .preferences import (
    get_or_create_preferences,
    update_preferences,
)

from .store_management import (
    generate_unique_slug,
    verify_store_ownership,
    get_store,
    get_user_stores,
    create_store,
    update_store,
    delete_store,
    get_default_store,
    set_default_store,
)

from .contacts import (
    get_contact,
    get_contacts,
    get_primary_contact,
    create_contact,
    update_contact,
    delete_contact,
    set_primary_contact,
    update_primary_contact,
)

from .numbering import (
    format_store_invoice_number,
    next_store_invoice_number,
    reset_invoice_counter,
)


__all__ = [
    # Exceptions
    'StoresServiceError',
    'StoreNotFoundError',
    'StoreAccessDenied',
    'ContactNotFoundError',
    'InvalidPreferenceError',
    'InvalidStoreDataError',

    # Preferences
    'get_or_create_preferences',
    'update_preferences',

    # Store Management
    'generate_unique_slug',
    'verify_store_ownership',
    'get_store',
    'get_user_stores',
    'create_store',
    'update_store',
    'delete_store',
    'get_default_store',
    'set_default_store',

    # Contacts
    'get_contact',
    'get_contacts',
    'get_primary_contact',
    'create_contact',
    'update_contact',
    'delete_contact',
    'set_primary_contact',
    'update_primary_contact',

    # Numbering
    'format_store_invoice_number',
    'next_store_invoice_number',
    'reset_invoice_counter',
]
