"""
Backoffice app services layer.

Staff-only administration of users, stores, invoices, payments and plans,
plus the dashboard and analytics aggregates.
"""

from .exceptions import (
    BackofficeServiceError,
    RecordNotFoundError,
    InvalidFilterError,
)

from .dashboard import (
    get_users_by_tier,
    get_dashboard_metrics,
    get_recent_transactions,
)

from .users import (
    list_users,
    get_user_detail,
    upgrade_user,
    downgrade_user,
    extend_user_subscription,
    reset_user_counter,
)

from .stores import (
    list_stores,
    get_store_detail,
    toggle_store_active,
    reset_store_counter,
)

from .invoices import (
    list_all_invoices,
    get_invoice_detail,
    delete_invoice_admin,
    update_invoice_status,
)

from .billing import (
    list_transactions,
    verify_transaction,
    list_subscriptions,
    list_plans,
    update_plan,
)

from .analytics import (
    BackofficeAnalytics,
    resolve_date_range,
    export_revenue_csv,
    export_user_growth_csv,
    export_invoices_csv,
)


__all__ = [
    # Exceptions
    'BackofficeServiceError',
    'RecordNotFoundError',
    'InvalidFilterError',

    # Dashboard
    'get_users_by_tier',
    'get_dashboard_metrics',
    'get_recent_transactions',

    # Users
    'list_users',
    'get_user_detail',
    'upgrade_user',
    'downgrade_user',
    'extend_user_subscription',
    'reset_user_counter',

    # Stores
    'list_stores',
    'get_store_detail',
    'toggle_store_active',
    'reset_store_counter',

    # Invoices
    'list_all_invoices',
    'get_invoice_detail',
    'delete_invoice_admin',
    'update_invoice_status',

    # Billing
    'list_transactions',
    'verify_transaction',
    'list_subscriptions',
    'list_plans',
    'update_plan',

    # Analytics
    'BackofficeAnalytics',
    'resolve_date_range',
    'export_revenue_csv',
    'export_user_growth_csv',
    'export_invoices_csv',
]
