from django.http import HttpResponse
from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.subscriptions.serializers import SubscriptionPlanSerializer
from apps.subscriptions.services import InvalidExtensionError, InvalidTierError

from .permissions import IsBackofficeAdmin
from .serializers import (
    AdminInvoiceDetailSerializer,
    AdminInvoiceListSerializer,
    AdminStoreDetailSerializer,
    AdminStoreSerializer,
    AdminSubscriptionSerializer,
    AdminTransactionSerializer,
    AdminUserSerializer,
    DashboardResponseSerializer,
    DateRangeQuerySerializer,
    ExtendInputSerializer,
    InvoiceStatusInputSerializer,
    UpgradeInputSerializer,
    UserDetailSerializer,
)
from .services import (
    BackofficeAnalytics,
    delete_invoice_admin,
    downgrade_user,
    export_invoices_csv,
    export_revenue_csv,
    export_user_growth_csv,
    extend_user_subscription,
    get_dashboard_metrics,
    get_invoice_detail,
    get_recent_transactions,
    get_store_detail,
    get_user_detail,
    list_all_invoices,
    list_plans,
    list_stores,
    list_subscriptions,
    list_transactions,
    list_users,
    reset_store_counter,
    reset_user_counter,
    resolve_date_range,
    toggle_store_active,
    update_invoice_status,
    update_plan,
    upgrade_user,
    verify_transaction,
    # Exceptions
    InvalidFilterError,
    RecordNotFoundError,
)

ADMIN_PERMISSIONS = [IsAuthenticated, IsBackofficeAdmin]


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class BackofficePagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _error_response(error):
    if isinstance(error, RecordNotFoundError):
        return Response({'error': str(error)}, status=status.HTTP_404_NOT_FOUND)
    return Response({'error': str(error)}, status=status.HTTP_400_BAD_REQUEST)


def _paginated(request, queryset, serializer_class):
    paginator = BackofficePagination()
    page = paginator.paginate_queryset(queryset, request)
    return paginator.get_paginated_response(serializer_class(page, many=True).data)


def _bool_param(value):
    if value is None or value == '':
        return None
    return value.lower() in ('1', 'true', 'yes')


def _date_range(request):
    query = DateRangeQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    return resolve_date_range(query.validated_data.get('date_from'), query.validated_data.get('date_to'))


def _csv_response(content, prefix, start, end):
    response = HttpResponse(content, content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{prefix}_{start}_{end}.csv"'
    return response


DATE_RANGE_PARAMETERS = [
    OpenApiParameter('date_from', OpenApiTypes.DATE, description='Start date (YYYY-MM-DD)'),
    OpenApiParameter('date_to', OpenApiTypes.DATE, description='End date (YYYY-MM-DD)'),
]


# =============================================================================
# Dashboard
# =============================================================================

@extend_schema(responses={200: DashboardResponseSerializer}, tags=['backoffice'])
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def dashboard(request):
    return Response({
        'metrics': get_dashboard_metrics(),
        'recent_transactions': AdminTransactionSerializer(get_recent_transactions(), many=True).data,
    })


# =============================================================================
# Users
# =============================================================================

@extend_schema(
    parameters=[
        OpenApiParameter('search', str, description='Email or display name'),
        OpenApiParameter('tier', str, description='free or premium'),
    ],
    responses={200: AdminUserSerializer(many=True), 400: ErrorResponseSerializer},
    tags=['backoffice'],
)
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def user_list(request):
    try:
        users = list_users(
            search=request.query_params.get('search'),
            tier=request.query_params.get('tier'),
        )
    except InvalidFilterError as e:
        return _error_response(e)
    return _paginated(request, users, AdminUserSerializer)


@extend_schema(responses={200: UserDetailSerializer, 404: ErrorResponseSerializer}, tags=['backoffice'])
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def user_detail(request, pk):
    try:
        detail = get_user_detail(user_id=pk)
    except RecordNotFoundError as e:
        return _error_response(e)
    return Response(UserDetailSerializer(detail).data)


@extend_schema(
    request=UpgradeInputSerializer,
    responses={200: AdminSubscriptionSerializer, 404: ErrorResponseSerializer},
    tags=['backoffice'],
)
@api_view(['POST'])
@permission_classes(ADMIN_PERMISSIONS)
def user_upgrade(request, pk):
    serializer = UpgradeInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    try:
        subscription = upgrade_user(user_id=pk, tier=serializer.validated_data['tier'])
    except (RecordNotFoundError, InvalidTierError) as e:
        return _error_response(e)
    return Response(AdminSubscriptionSerializer(subscription).data)


@extend_schema(request=None, responses={200: AdminSubscriptionSerializer, 404: ErrorResponseSerializer},
               tags=['backoffice'])
@api_view(['POST'])
@permission_classes(ADMIN_PERMISSIONS)
def user_downgrade(request, pk):
    try:
        subscription = downgrade_user(user_id=pk)
    except RecordNotFoundError as e:
        return _error_response(e)
    return Response(AdminSubscriptionSerializer(subscription).data)


@extend_schema(
    request=ExtendInputSerializer,
    responses={200: AdminSubscriptionSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    tags=['backoffice'],
)
@api_view(['POST'])
@permission_classes(ADMIN_PERMISSIONS)
def user_extend(request, pk):
    serializer = ExtendInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    try:
        subscription = extend_user_subscription(user_id=pk, days=serializer.validated_data['days'])
    except (RecordNotFoundError, InvalidExtensionError) as e:
        return _error_response(e)
    return Response(AdminSubscriptionSerializer(subscription).data)


@extend_schema(request=None, responses={200: AdminSubscriptionSerializer, 404: ErrorResponseSerializer},
               tags=['backoffice'])
@api_view(['POST'])
@permission_classes(ADMIN_PERMISSIONS)
def user_reset_counter(request, pk):
    try:
        subscription = reset_user_counter(user_id=pk)
    except RecordNotFoundError as e:
        return _error_response(e)
    return Response(AdminSubscriptionSerializer(subscription).data)


# =============================================================================
# Stores
# =============================================================================

@extend_schema(
    parameters=[
        OpenApiParameter('search', str, description='Name, slug or owner email'),
        OpenApiParameter('is_active', bool),
    ],
    responses={200: AdminStoreSerializer(many=True)},
    tags=['backoffice'],
)
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def store_list(request):
    stores = list_stores(
        search=request.query_params.get('search'),
        is_active=_bool_param(request.query_params.get('is_active')),
    )
    return _paginated(request, stores, AdminStoreSerializer)


@extend_schema(responses={200: AdminStoreDetailSerializer, 404: ErrorResponseSerializer}, tags=['backoffice'])
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def store_detail(request, pk):
    try:
        store = get_store_detail(store_id=pk)
    except RecordNotFoundError as e:
        return _error_response(e)
    return Response(AdminStoreDetailSerializer(store).data)


@extend_schema(request=None, responses={200: AdminStoreSerializer, 404: ErrorResponseSerializer},
               tags=['backoffice'])
@api_view(['POST'])
@permission_classes(ADMIN_PERMISSIONS)
def store_toggle_active(request, pk):
    try:
        store = toggle_store_active(store_id=pk)
    except RecordNotFoundError as e:
        return _error_response(e)
    return Response(AdminStoreSerializer(store).data)


@extend_schema(request=None, responses={200: AdminStoreSerializer, 404: ErrorResponseSerializer},
               tags=['backoffice'])
@api_view(['POST'])
@permission_classes(ADMIN_PERMISSIONS)
def store_reset_counter(request, pk):
    try:
        store = reset_store_counter(store_id=pk)
    except RecordNotFoundError as e:
        return _error_response(e)
    return Response(AdminStoreSerializer(store).data)


# =============================================================================
# Invoices
# =============================================================================

@extend_schema(
    parameters=[
        OpenApiParameter('search', str, description='Invoice number or customer name'),
        OpenApiParameter('status', str, description='draft, pending or synced'),
        OpenApiParameter('user', OpenApiTypes.UUID, description='Owner id'),
        *DATE_RANGE_PARAMETERS,
    ],
    responses={200: AdminInvoiceListSerializer(many=True), 400: ErrorResponseSerializer},
    tags=['backoffice'],
)
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def invoice_list(request):
    query = DateRangeQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)

    user_id = request.query_params.get('user')
    if user_id:
        user_field = serializers.UUIDField()
        user_id = user_field.run_validation(user_id)

    try:
        invoices = list_all_invoices(
            search=request.query_params.get('search'),
            status=request.query_params.get('status'),
            user_id=user_id,
            date_from=query.validated_data.get('date_from'),
            date_to=query.validated_data.get('date_to'),
        )
    except InvalidFilterError as e:
        return _error_response(e)
    return _paginated(request, invoices, AdminInvoiceListSerializer)


@extend_schema(
    methods=['GET'],
    responses={200: AdminInvoiceDetailSerializer, 404: ErrorResponseSerializer},
    tags=['backoffice'],
)
@extend_schema(
    methods=['DELETE'],
    responses={204: None, 404: ErrorResponseSerializer},
    tags=['backoffice'],
)
@api_view(['GET', 'DELETE'])
@permission_classes(ADMIN_PERMISSIONS)
def invoice_detail(request, pk):
    try:
        if request.method == 'DELETE':
            delete_invoice_admin(invoice_id=pk)
            return Response(status=status.HTTP_204_NO_CONTENT)
        invoice = get_invoice_detail(invoice_id=pk)
    except RecordNotFoundError as e:
        return _error_response(e)
    return Response(AdminInvoiceDetailSerializer(invoice).data)


@extend_schema(
    request=InvoiceStatusInputSerializer,
    responses={200: AdminInvoiceListSerializer, 404: ErrorResponseSerializer},
    tags=['backoffice'],
)
@api_view(['POST'])
@permission_classes(ADMIN_PERMISSIONS)
def invoice_status(request, pk):
    serializer = InvoiceStatusInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    try:
        invoice = update_invoice_status(invoice_id=pk, status=serializer.validated_data['status'])
    except (RecordNotFoundError, InvalidFilterError) as e:
        return _error_response(e)
    return Response(AdminInvoiceListSerializer(invoice).data)


# =============================================================================
# Transactions, subscriptions and plans
# =============================================================================

@extend_schema(
    parameters=[
        OpenApiParameter('status', str, description='pending, completed, failed or expired'),
        OpenApiParameter('tier', str),
        *DATE_RANGE_PARAMETERS,
    ],
    responses={200: AdminTransactionSerializer(many=True), 400: ErrorResponseSerializer},
    tags=['backoffice'],
)
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def transaction_list(request):
    query = DateRangeQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    try:
        payments = list_transactions(
            status=request.query_params.get('status'),
            tier=request.query_params.get('tier'),
            date_from=query.validated_data.get('date_from'),
            date_to=query.validated_data.get('date_to'),
        )
    except InvalidFilterError as e:
        return _error_response(e)
    return _paginated(request, payments, AdminTransactionSerializer)


@extend_schema(request=None, responses={200: AdminTransactionSerializer, 404: ErrorResponseSerializer},
               tags=['backoffice'])
@api_view(['POST'])
@permission_classes(ADMIN_PERMISSIONS)
def transaction_verify(request, pk):
    try:
        payment = verify_transaction(transaction_id=pk)
    except RecordNotFoundError as e:
        return _error_response(e)
    return Response(AdminTransactionSerializer(payment).data)


@extend_schema(
    parameters=[
        OpenApiParameter('tier', str),
        OpenApiParameter('state', str, description='active or expired'),
    ],
    responses={200: AdminSubscriptionSerializer(many=True), 400: ErrorResponseSerializer},
    tags=['backoffice'],
)
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def subscription_list(request):
    try:
        subscriptions = list_subscriptions(
            tier=request.query_params.get('tier'),
            state=request.query_params.get('state'),
        )
    except InvalidFilterError as e:
        return _error_response(e)
    return _paginated(request, subscriptions, AdminSubscriptionSerializer)


@extend_schema(responses={200: SubscriptionPlanSerializer(many=True)}, tags=['backoffice'])
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def plan_list(request):
    return Response(SubscriptionPlanSerializer(list_plans(), many=True).data)


@extend_schema(
    request=SubscriptionPlanSerializer,
    responses={200: SubscriptionPlanSerializer, 404: ErrorResponseSerializer},
    tags=['backoffice'],
)
@api_view(['PATCH'])
@permission_classes(ADMIN_PERMISSIONS)
def plan_detail(request, pk):
    serializer = SubscriptionPlanSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    try:
        plan = update_plan(plan_id=pk, **serializer.validated_data)
    except RecordNotFoundError as e:
        return _error_response(e)
    return Response(SubscriptionPlanSerializer(plan).data)


# =============================================================================
# Analytics
# =============================================================================

@extend_schema(parameters=DATE_RANGE_PARAMETERS, responses={200: OpenApiTypes.OBJECT}, tags=['backoffice'])
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def analytics_revenue(request):
    try:
        start, end = _date_range(request)
    except InvalidFilterError as e:
        return _error_response(e)
    return Response(BackofficeAnalytics.revenue(start, end))


@extend_schema(parameters=DATE_RANGE_PARAMETERS, responses={200: OpenApiTypes.OBJECT}, tags=['backoffice'])
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def analytics_users(request):
    try:
        start, end = _date_range(request)
    except InvalidFilterError as e:
        return _error_response(e)
    return Response(BackofficeAnalytics.users(start, end))


@extend_schema(parameters=DATE_RANGE_PARAMETERS, responses={200: OpenApiTypes.OBJECT}, tags=['backoffice'])
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def analytics_invoices(request):
    try:
        start, end = _date_range(request)
    except InvalidFilterError as e:
        return _error_response(e)
    return Response(BackofficeAnalytics.invoices(start, end))


CSV_EXPORTS = {
    'revenue': export_revenue_csv,
    'users': export_user_growth_csv,
    'invoices': export_invoices_csv,
}


@extend_schema(
    parameters=DATE_RANGE_PARAMETERS,
    responses={(200, 'text/csv'): OpenApiTypes.STR, 404: ErrorResponseSerializer},
    tags=['backoffice'],
)
@api_view(['GET'])
@permission_classes(ADMIN_PERMISSIONS)
def analytics_export(request, report):
    """CSV download of the revenue, users or invoices report."""
    exporter = CSV_EXPORTS.get(report)
    if exporter is None:
        return Response({'error': f'Unknown report: {report}'}, status=status.HTTP_404_NOT_FOUND)

    try:
        start, end = _date_range(request)
    except InvalidFilterError as e:
        return _error_response(e)

    content, _ = exporter(start, end)
    return _csv_response(content, report, start, end)
