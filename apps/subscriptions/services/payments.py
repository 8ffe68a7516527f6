"""
Tier upgrade payments through Mayar.

A checkout is created at the provider and stored as a pending
``PaymentTransaction`` keyed by the provider transaction id. The provider then
reports the outcome through a webhook, or the user triggers a verification
after the redirect back; either path upgrades the subscription exactly once.
"""

import hashlib
import hmac
import logging
from datetime import timedelta
from io import BytesIO

import qrcode
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from ..models import PaymentStatus, PaymentTransaction
from ..pricing import TIER_DURATION_DAYS, TIER_PRICES
from .exceptions import (
    InvalidTierError,
    InvalidWebhookPayload,
    PaymentNotFoundError,
)
from .mayar_client import MayarClient
from .subscription_management import upgrade_to_tier
from .tiers import get_active_plan

logger = logging.getLogger(__name__)

SUCCESS_EVENTS = {'payment.received'}
SUCCESS_STATUSES = {'SUCCESS', 'completed'}
FAILED_STATUSES = {'FAILED', 'failed'}

# Provider invoice status -> local status
PROVIDER_STATUS_MAP = {
    'paid': PaymentStatus.COMPLETED,
    'success': PaymentStatus.COMPLETED,
    'completed': PaymentStatus.COMPLETED,
    'failed': PaymentStatus.FAILED,
    'expired': PaymentStatus.EXPIRED,
}


def _short(value) -> str:
    return f"{str(value)[:8]}..."


def get_tier_amount(tier: str) -> int:
    """
    Price of one period of a tier in rupiah.

    The active plan's price wins over the built-in price list.

    Raises:
        InvalidTierError: If the tier has no price (free or unknown)
    """
    plan = get_active_plan(tier)
    amount = plan.price if plan is not None and plan.price else TIER_PRICES.get(tier, 0)
    if not amount:
        raise InvalidTierError(f"Invalid tier: {tier}")
    return amount


def create_payment(*, user, tier: str, client: MayarClient = None) -> dict:
    """
    Create a provider checkout and a pending transaction for it.

    Args:
        user: Paying user
        tier: Paid tier to buy
        client: Optional MayarClient, a default one is built from settings

    Returns:
        dict with ``invoice_id``, ``payment_url``, ``amount`` and ``record_id``

    Raises:
        InvalidTierError: Tier cannot be bought
        PaymentConfigurationError: API key missing
        PaymentProviderError: Provider call failed
    """
    amount = get_tier_amount(tier)
    client = client or MayarClient()

    days = TIER_DURATION_DAYS.get(tier) or 30
    description = f"{tier.capitalize()} Tier Subscription - {days} Days"
    email = user.email or 'noreply@example.com'

    data = client.create_invoice({
        'name': user.display_name or email.split('@')[0] or 'Customer',
        'email': email,
        'mobile': '081234567890',
        'redirectUrl': f"{settings.APP_URL.rstrip('/')}/dashboard?payment=success",
        'description': description,
        'expiredAt': (timezone.now() + timedelta(days=30)).isoformat(),
        'items': [{'rate': amount, 'description': description, 'quantity': 1}],
    })

    payment = PaymentTransaction.objects.create(
        user=user,
        mayar_invoice_id=data['transactionId'],
        mayar_transaction_id=data.get('id'),
        amount=amount,
        tier=tier,
        status=PaymentStatus.PENDING,
        payment_url=data['link'],
    )
    logger.info("Created checkout %s for tier %s", _short(payment.mayar_invoice_id), tier)

    return {
        'record_id': payment.id,
        'invoice_id': payment.mayar_invoice_id,
        'payment_url': payment.payment_url,
        'amount': amount,
    }


def verify_webhook_signature(body, signature: str) -> bool:
    """
    Check an ``HMAC-SHA256`` hex signature over the raw webhook body.

    Returns False when no webhook secret is configured.
    """
    secret = settings.MAYAR_WEBHOOK_SECRET
    if not secret:
        logger.error("MAYAR_WEBHOOK_SECRET is not configured")
        return False
    if not signature:
        return False

    if isinstance(body, str):
        body = body.encode('utf-8')
    expected = hmac.new(secret.encode('utf-8'), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature)


def _find_locked(*ids):
    for candidate in ids:
        if not candidate:
            continue
        payment = (
            PaymentTransaction.objects
            .select_for_update()
            .filter(mayar_invoice_id=candidate)
            .first()
        )
        if payment is not None:
            return payment
    return None


@transaction.atomic
def handle_payment_success(*, invoice_id: str, alternative_id: str = None,
                           payment_method: str = None) -> PaymentTransaction:
    """
    Mark a transaction paid and upgrade its user.

    Repeated notifications for an already completed transaction return it
    unchanged so the subscription is only extended once.

    Raises:
        PaymentNotFoundError: Neither id matches a transaction
    """
    payment = _find_locked(invoice_id, alternative_id)
    if payment is None:
        raise PaymentNotFoundError(f"Payment transaction not found with ID: {_short(invoice_id)}")

    if payment.status == PaymentStatus.COMPLETED:
        logger.info("Payment %s already completed", _short(payment.mayar_invoice_id))
        return payment

    payment.mark_completed(payment_method=payment_method)
    upgrade_to_tier(user=payment.user, tier=payment.tier)

    logger.info("Payment %s completed, user upgraded to %s", _short(payment.mayar_invoice_id), payment.tier)
    return payment


@transaction.atomic
def handle_payment_failed(*, invoice_id: str) -> PaymentTransaction:
    payment = _find_locked(invoice_id)
    if payment is None:
        raise PaymentNotFoundError(f"Payment transaction not found with ID: {_short(invoice_id)}")

    # A late failure notice must not undo a completed payment
    if payment.status != PaymentStatus.COMPLETED:
        payment.mark_failed()
        logger.warning("Payment %s failed", _short(payment.mayar_invoice_id))
    return payment


def _text(value):
    """Scalar webhook fields as strings; objects and lists count as missing."""
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        return None
    return str(value)


def process_webhook(payload: dict) -> str:
    """
    Route a webhook body to the success or failure handler.

    Mayar sends ``{"event": "payment.received", "data": {"id", "transactionId",
    "status", "paymentMethod", ...}}``.

    Returns:
        'completed', 'failed' or 'ignored'

    Raises:
        InvalidWebhookPayload: Malformed body or no transaction id
        PaymentNotFoundError: The ids match no transaction
    """
    if not isinstance(payload, dict):
        raise InvalidWebhookPayload("Webhook payload must be an object")

    data = payload.get('data')
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidWebhookPayload("Webhook data must be an object")

    event = _text(payload.get('event'))
    transaction_id = _text(data.get('transactionId'))
    product_id = _text(data.get('id'))
    provider_status = _text(data.get('status')) or _text(payload.get('status'))

    if not transaction_id and not product_id:
        raise InvalidWebhookPayload("Missing invoice ID")

    invoice_id = transaction_id or product_id
    alternative_id = product_id if invoice_id == transaction_id else transaction_id

    if event in SUCCESS_EVENTS or provider_status in SUCCESS_STATUSES:
        payment_method = data.get('paymentMethod')
        handle_payment_success(
            invoice_id=invoice_id,
            alternative_id=alternative_id,
            payment_method=str(payment_method) if payment_method else None,
        )
        return 'completed'

    if provider_status in FAILED_STATUSES:
        handle_payment_failed(invoice_id=invoice_id)
        return 'failed'

    logger.info("Ignoring webhook event=%s status=%s", event, provider_status)
    return 'ignored'


def get_user_payment(*, user, record_id) -> PaymentTransaction:
    payment = PaymentTransaction.objects.filter(id=record_id, user=user).first()
    if payment is None:
        raise PaymentNotFoundError("Payment not found")
    return payment


def verify_payment(*, user, record_id, client: MayarClient = None) -> dict:
    """
    Ask the provider about one of the user's pending payments.

    Completed, failed or expired payments are reported as stored. A pending
    one is looked up at the provider and its status applied locally.

    Raises:
        PaymentNotFoundError: No such payment for this user
        PaymentProviderError: Provider lookup failed
    """
    payment = get_user_payment(user=user, record_id=record_id)

    if payment.status == PaymentStatus.PENDING:
        client = client or MayarClient()
        data = client.get_invoice(payment.mayar_invoice_id)
        provider_status = str(data.get('status', '')).lower()
        new_status = PROVIDER_STATUS_MAP.get(provider_status)

        if new_status == PaymentStatus.COMPLETED:
            payment = handle_payment_success(
                invoice_id=payment.mayar_invoice_id,
                payment_method=data.get('paymentMethod'),
            )
        elif new_status == PaymentStatus.FAILED:
            payment = handle_payment_failed(invoice_id=payment.mayar_invoice_id)
        elif new_status == PaymentStatus.EXPIRED:
            payment.status = PaymentStatus.EXPIRED
            payment.save(update_fields=['status', 'updated_at'])

    return {
        'record_id': payment.id,
        'status': payment.status,
        'tier': payment.tier,
        'completed_at': payment.completed_at,
    }


def lookup_payment(*, user, mayar_invoice_id: str) -> PaymentTransaction:
    payment = PaymentTransaction.objects.filter(
        user=user,
        mayar_invoice_id=mayar_invoice_id,
    ).first()
    if payment is None:
        raise PaymentNotFoundError("Payment not found")
    return payment


def list_user_payments(*, user):
    return PaymentTransaction.objects.filter(user=user).order_by('-created_at')


def payment_qr_png(payment: PaymentTransaction) -> bytes:
    """PNG bytes of a QR code pointing at the checkout URL."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(payment.payment_url)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()
