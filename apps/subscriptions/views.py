import json
import logging

from django.http import HttpResponse
from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from django.conf import settings

from .models import SubscriptionPlan
from .pricing import TIER_CONFIGS, get_tier_config
from .serializers import (
    CreatePaymentSerializer,
    CreatePaymentResponseSerializer,
    PaymentLookupSerializer,
    PaymentTransactionSerializer,
    SubscriptionPlanSerializer,
    SubscriptionStatusSerializer,
    TierFeaturesSerializer,
    VerifyPaymentResponseSerializer,
)
from .services import (
    create_payment,
    get_subscription_status,
    get_user_features,
    get_user_payment,
    get_user_tier,
    list_user_payments,
    lookup_payment,
    payment_qr_png,
    process_webhook,
    verify_payment,
    verify_webhook_signature,
    InvalidTierError,
    InvalidWebhookPayload,
    PaymentConfigurationError,
    PaymentNotFoundError,
    PaymentProviderError,
    SubscriptionsServiceError,
)

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = 'HTTP_X_MAYAR_SIGNATURE'


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class WebhookResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()


class PaymentPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


# =============================================================================
# Subscription status
# =============================================================================

@extend_schema(
    responses={200: SubscriptionStatusSerializer},
    description="Current tier, invoice quota and reset date.",
    tags=['subscriptions'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def subscription_status(request):
    data = get_subscription_status(user=request.user)
    return Response(SubscriptionStatusSerializer(data).data)


@extend_schema(
    responses={200: TierFeaturesSerializer},
    description="Feature matrix of the tier currently in effect.",
    tags=['subscriptions'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def subscription_features(request):
    tier = get_user_tier(user=request.user)
    features = get_user_features(user=request.user)
    return Response(TierFeaturesSerializer({'tier': tier, **features}).data)


@extend_schema(
    responses={200: SubscriptionPlanSerializer(many=True)},
    description="Active plans for the pricing page. Falls back to built-in tiers when none are configured.",
    tags=['subscriptions'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def plan_list(request):
    plans = SubscriptionPlan.objects.filter(is_active=True)
    if plans.exists():
        return Response(SubscriptionPlanSerializer(plans, many=True).data)

    return Response([
        {'tier': tier, **get_tier_config(tier)}
        for tier in TIER_CONFIGS
    ])


# =============================================================================
# Payments
# =============================================================================

@extend_schema(
    methods=['GET'],
    responses={200: PaymentTransactionSerializer(many=True)},
    description="List the current user's payments, newest first.",
    tags=['payments'],
)
@extend_schema(
    methods=['POST'],
    request=CreatePaymentSerializer,
    responses={
        201: CreatePaymentResponseSerializer,
        400: ErrorResponseSerializer,
        502: ErrorResponseSerializer,
        503: ErrorResponseSerializer,
    },
    description="Create a Mayar checkout for a tier upgrade.",
    tags=['payments'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def payments(request):
    if request.method == 'GET':
        paginator = PaymentPagination()
        page = paginator.paginate_queryset(list_user_payments(user=request.user), request)
        return paginator.get_paginated_response(PaymentTransactionSerializer(page, many=True).data)

    serializer = CreatePaymentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = create_payment(user=request.user, tier=serializer.validated_data['tier'])
    except InvalidTierError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except PaymentConfigurationError as e:
        return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
    except PaymentProviderError as e:
        logger.error("Checkout creation failed: %s", e)
        return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)

    return Response(CreatePaymentResponseSerializer(result).data, status=status.HTTP_201_CREATED)


@extend_schema(
    request=None,
    responses={
        200: VerifyPaymentResponseSerializer,
        404: ErrorResponseSerializer,
        429: ErrorResponseSerializer,
        502: ErrorResponseSerializer,
    },
    description="Ask Mayar for the status of a pending payment and apply it.",
    tags=['payments'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def payment_verify(request, pk):
    try:
        result = verify_payment(user=request.user, record_id=pk)
    except PaymentNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except PaymentProviderError as e:
        if e.status_code == 429:
            return Response(
                {'error': 'Too many verification attempts. Please wait a moment and try again.'},
                status=status.HTTP_429_TOO_MANY_REQUESTS
            )
        return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)
    except SubscriptionsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(VerifyPaymentResponseSerializer(result).data)


@extend_schema(
    responses={(200, 'image/png'): bytes, 404: ErrorResponseSerializer},
    description="QR code (PNG) of the checkout link.",
    tags=['payments'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def payment_qr(request, pk):
    try:
        payment = get_user_payment(user=request.user, record_id=pk)
    except PaymentNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    if not payment.payment_url:
        return Response({'error': 'Payment has no checkout link'}, status=status.HTTP_404_NOT_FOUND)

    return HttpResponse(payment_qr_png(payment), content_type='image/png')


@extend_schema(
    parameters=[
        OpenApiParameter(name='mayar_invoice_id', type=str, required=True,
                         description='Provider transaction id'),
    ],
    responses={200: PaymentTransactionSerializer, 404: ErrorResponseSerializer},
    description="Find one of the user's payments by its provider id.",
    tags=['payments'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def payment_lookup(request):
    serializer = PaymentLookupSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)

    try:
        payment = lookup_payment(user=request.user, **serializer.validated_data)
    except PaymentNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response(PaymentTransactionSerializer(payment).data)


@extend_schema(
    request=None,
    responses={
        200: WebhookResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
    },
    description=(
        "Mayar payment notification. Answers 200 for every well-formed "
        "notification so the provider stops retrying."
    ),
    tags=['payments'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def payment_webhook(request):
    raw_body = request.body

    if settings.MAYAR_WEBHOOK_SECRET:
        signature = request.META.get(SIGNATURE_HEADER, '')
        if not verify_webhook_signature(raw_body, signature):
            logger.warning("Rejected webhook with invalid signature")
            return Response({'error': 'Invalid signature'}, status=status.HTTP_401_UNAUTHORIZED)

    try:
        payload = json.loads(raw_body or b'')
    except ValueError:
        return Response({'error': 'Invalid JSON payload'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        outcome = process_webhook(payload)
    except InvalidWebhookPayload as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except SubscriptionsServiceError as e:
        logger.error("Webhook processing failed: %s", e)
        return Response({
            'success': False,
            'message': 'Webhook received but processing failed',
        })

    logger.info("Webhook processed: %s", outcome)
    return Response({
        'success': True,
        'message': 'Webhook processed successfully',
    })
