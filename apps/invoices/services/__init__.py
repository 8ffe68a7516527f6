"""
Invoices app services layer.

Invoice CRUD with server-side totals, numbering, history windows, PDF and
JPEG export, and reports.
"""

from .exceptions import (
    InvoicesServiceError,
    InvoiceNotFoundError,
    InvalidInvoiceDataError,
    DuplicateInvoiceNumberError,
    InvalidExportQualityError,
    InvalidReportPeriodError,
)

from .calculations import (
    round_money,
    calculate_item_subtotal,
    calculate_subtotal,
    calculate_total,
    format_rupiah,
)

from .numbering import (
    generate_invoice_number,
    get_next_invoice_sequence,
)

from .invoice_management import (
    create_invoice_with_items,
    update_invoice,
    delete_invoice,
    upsert_invoice_with_items,
    get_invoice,
    list_invoices,
    apply_history_limit,
)

from .export import (
    QUALITY_PRESETS,
    sanitize_filename,
    export_filename,
    render_invoice_pdf,
    render_invoice_jpeg,
    export_invoice_pdf,
    export_invoice_jpeg,
)

from .reports import (
    get_available_report_months,
    generate_monthly_report,
    get_revenue_metrics,
)


__all__ = [
    # Exceptions
    'InvoicesServiceError',
    'InvoiceNotFoundError',
    'InvalidInvoiceDataError',
    'DuplicateInvoiceNumberError',
    'InvalidExportQualityError',
    'InvalidReportPeriodError',

    # Calculations
    'round_money',
    'calculate_item_subtotal',
    'calculate_subtotal',
    'calculate_total',
    'format_rupiah',

    # Numbering
    'generate_invoice_number',
    'get_next_invoice_sequence',

    # Invoice Management
    'create_invoice_with_items',
    'update_invoice',
    'delete_invoice',
    'upsert_invoice_with_items',
    'get_invoice',
    'list_invoices',
    'apply_history_limit',

    # Export
    'QUALITY_PRESETS',
    'sanitize_filename',
    'export_filename',
    'render_invoice_pdf',
    'render_invoice_jpeg',
    'export_invoice_pdf',
    'export_invoice_jpeg',

    # Reports
    'get_available_report_months',
    'generate_monthly_report',
    'get_revenue_metrics',
]
