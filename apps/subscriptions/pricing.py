"""
Pricing Configuration
=====================

Default limits, prices and feature matrix per tier. Admins can override
everything here through ``SubscriptionPlan`` rows; these values apply when
no active plan exists for a tier.
"""

TIER_PRICES = {
    'premium': 1000,
}

TIER_LIMITS = {
    'free': 10,
    'premium': 200,
}

# Days of access bought by one payment; 0 means forever
TIER_DURATION_DAYS = {
    'free': 0,
    'premium': 30,
}

EXPORT_QUALITIES = ['standard', 'high', 'print-ready']

TIER_FEATURES = {
    'free': {
        'invoice_limit': TIER_LIMITS['free'],
        'template_count': 1,
        'has_logo': False,
        'has_signature': False,
        'has_custom_colors': False,
        'history_limit': 10,
        'history_type': 'count',
        'has_dashboard_totals': False,
        'export_qualities': ['standard'],
        'has_monthly_report': False,
        'has_customer_book': False,
    },
    'premium': {
        'invoice_limit': TIER_LIMITS['premium'],
        'template_count': 3,
        'has_logo': True,
        'has_signature': True,
        'has_custom_colors': True,
        'history_limit': 30,
        'history_type': 'days',
        'has_dashboard_totals': True,
        'export_qualities': list(EXPORT_QUALITIES),
        'has_monthly_report': True,
        'has_customer_book': True,
    },
}

TIER_CONFIGS = {
    'free': {
        'name': 'Free',
        'price': 0,
        'invoice_limit': TIER_LIMITS['free'],
        'duration': TIER_DURATION_DAYS['free'],
        'features': [
            '10 invoices per month',
            'Basic invoice template',
            'Standard JPEG export',
            'Last 10 invoices in history',
        ],
    },
    'premium': {
        'name': 'Premium',
        'price': TIER_PRICES['premium'],
        'invoice_limit': TIER_LIMITS['premium'],
        'duration': TIER_DURATION_DAYS['premium'],
        'features': [
            '200 invoices per month',
            'Store logo and signature',
            'Custom brand colors',
            'High and print-ready export',
            'Customer book',
            'Dashboard totals and monthly report',
            '30 days of history',
        ],
    },
}


def format_price(amount):
    """Format rupiah the Indonesian way: ``Rp 15.000``, ``Gratis`` for 0."""
    if not amount:
        return 'Gratis'
    return f"Rp {amount:,}".replace(',', '.')


def get_tier_price(tier):
    return TIER_PRICES.get(tier, 0)


def get_tier_limit(tier):
    return TIER_LIMITS.get(tier, 0)


def get_tier_config(tier):
    config = TIER_CONFIGS.get(tier)
    if config is None:
        return None
    return {**config, 'price_formatted': format_price(config['price'])}
