from django.http import HttpResponse
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework import viewsets, status, serializers
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.stores.services import get_store, StoreAccessDenied, StoreNotFoundError

from .serializers import (
    CalculateInputSerializer,
    CalculateResponseSerializer,
    InvoiceInputSerializer,
    InvoiceListSerializer,
    InvoiceSerializer,
)
from .services import (
    apply_history_limit,
    calculate_subtotal,
    calculate_total,
    create_invoice_with_items,
    delete_invoice,
    export_invoice_jpeg,
    export_invoice_pdf,
    generate_monthly_report,
    get_available_report_months,
    get_invoice,
    get_next_invoice_sequence,
    get_revenue_metrics,
    list_invoices,
    update_invoice,
    upsert_invoice_with_items,
    # Exceptions
    InvoiceNotFoundError,
    InvoicesServiceError,
)


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class SequenceResponseSerializer(serializers.Serializer):
    sequence = serializers.IntegerField()


class InvoicePagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _service_error_response(error):
    """Map service exceptions to an error response."""
    if isinstance(error, (InvoiceNotFoundError, StoreNotFoundError)):
        return Response({'error': str(error)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(error, StoreAccessDenied):
        return Response({'error': str(error)}, status=status.HTTP_403_FORBIDDEN)
    return Response({'error': str(error)}, status=status.HTTP_400_BAD_REQUEST)


def _split_payload(validated_data):
    data = dict(validated_data)
    items = data.pop('items', None)
    if items is not None:
        items = [dict(item) for item in items]
    return data, items


def _attachment(content, content_type, filename):
    response = HttpResponse(content, content_type=content_type)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


class InvoiceViewSet(viewsets.ModelViewSet):
    """
    ViewSet for the user's invoices.

    All business logic is handled by services.

    list: Invoices within the tier's history window (?status=, ?store=, ?limit=)
    create: Create an invoice with items (counts against the monthly limit)
    retrieve: Invoice with items
    update/partial_update: Edit fields; items are replaced when sent
    destroy: Delete an invoice
    """

    permission_classes = [IsAuthenticated]
    pagination_class = InvoicePagination

    def get_serializer_class(self):
        if self.action == 'list':
            return InvoiceListSerializer
        if self.action in ('create', 'update', 'partial_update', 'upsert'):
            return InvoiceInputSerializer
        return InvoiceSerializer

    def get_queryset(self):
        """Return only the user's invoices, within the tier's history window."""
        queryset = list_invoices(
            user=self.request.user,
            status=self.request.query_params.get('status'),
            store_id=self.request.query_params.get('store'),
        )
        return apply_history_limit(user=self.request.user, queryset=queryset)

    @extend_schema(
        parameters=[
            OpenApiParameter('status', str, description='draft, pending or synced'),
            OpenApiParameter('store', str, description='Store UUID'),
            OpenApiParameter('limit', int, description='Maximum number of invoices'),
        ],
    )
    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()

        limit = request.query_params.get('limit')
        if limit and limit.isdigit():
            queryset = queryset[:int(limit)]

        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(InvoiceListSerializer(page, many=True).data)

    def retrieve(self, request, pk=None, *args, **kwargs):
        try:
            invoice = get_invoice(invoice_id=pk, user=request.user)
        except InvoiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(InvoiceSerializer(invoice).data)

    @extend_schema(request=InvoiceInputSerializer, responses={201: InvoiceSerializer, 400: ErrorResponseSerializer})
    def create(self, request, *args, **kwargs):
        serializer = InvoiceInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data, items = _split_payload(serializer.validated_data)

        try:
            invoice = create_invoice_with_items(user=request.user, data=data, items=items or [])
        except (InvoicesServiceError, StoreNotFoundError, StoreAccessDenied) as e:
            return _service_error_response(e)

        return Response(InvoiceSerializer(get_invoice(invoice_id=invoice.id, user=request.user)).data,
                        status=status.HTTP_201_CREATED)

    @extend_schema(request=InvoiceInputSerializer, responses={200: InvoiceSerializer, 400: ErrorResponseSerializer})
    def update(self, request, pk=None, *args, **kwargs):
        serializer = InvoiceInputSerializer(data=request.data, partial=kwargs.get('partial', False))
        serializer.is_valid(raise_exception=True)
        data, items = _split_payload(serializer.validated_data)

        try:
            update_invoice(user=request.user, invoice_id=pk, data=data, items=items)
            invoice = get_invoice(invoice_id=pk, user=request.user)
        except (InvoicesServiceError, StoreNotFoundError, StoreAccessDenied) as e:
            return _service_error_response(e)

        return Response(InvoiceSerializer(invoice).data)

    def destroy(self, request, pk=None, *args, **kwargs):
        try:
            delete_invoice(user=request.user, invoice_id=pk)
        except InvoiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=InvoiceInputSerializer, responses={200: InvoiceSerializer, 201: InvoiceSerializer})
    @action(detail=False, methods=['post'])
    def upsert(self, request):
        """Create or update by id, then by invoice number."""
        serializer = InvoiceInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data, items = _split_payload(serializer.validated_data)

        try:
            invoice, created = upsert_invoice_with_items(user=request.user, data=data, items=items or [])
        except (InvoicesServiceError, StoreNotFoundError, StoreAccessDenied) as e:
            return _service_error_response(e)

        return Response(
            InvoiceSerializer(get_invoice(invoice_id=invoice.id, user=request.user)).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )

    @extend_schema(responses={(200, 'application/pdf'): bytes, 404: ErrorResponseSerializer})
    @action(detail=True, methods=['get'])
    def pdf(self, request, pk=None):
        try:
            filename, content = export_invoice_pdf(user=request.user, invoice_id=pk)
        except InvoiceNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return _attachment(content, 'application/pdf', filename)

    @extend_schema(
        parameters=[OpenApiParameter('quality', str, description='standard, high or print-ready')],
        responses={(200, 'image/jpeg'): bytes, 403: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    )
    @action(detail=True, methods=['get'])
    def jpeg(self, request, pk=None):
        quality = request.query_params.get('quality', 'standard')
        try:
            filename, content = export_invoice_jpeg(user=request.user, invoice_id=pk, quality=quality)
        except InvoicesServiceError as e:
            return _service_error_response(e)
        return _attachment(content, 'image/jpeg', filename)

    @extend_schema(
        parameters=[
            OpenApiParameter('store', str, required=True, description='Store UUID'),
            OpenApiParameter('date', str, description='YYYY-MM-DD, today when omitted'),
        ],
        responses={200: SequenceResponseSerializer, 400: ErrorResponseSerializer},
    )
    @action(detail=False, methods=['get'], url_path='next-sequence')
    def next_sequence(self, request):
        """Sequence number the store's next invoice of that day would get."""
        store_id = request.query_params.get('store')
        if not store_id:
            return Response({'error': 'store is required'}, status=status.HTTP_400_BAD_REQUEST)

        raw_date = request.query_params.get('date')
        invoice_date = parse_date(raw_date) if raw_date else timezone.localdate()
        if invoice_date is None:
            return Response({'error': 'date must be YYYY-MM-DD'}, status=status.HTTP_400_BAD_REQUEST)

        try:
            store = get_store(store_id=store_id, user=request.user)
        except (StoreNotFoundError, StoreAccessDenied) as e:
            return _service_error_response(e)

        return Response({'sequence': get_next_invoice_sequence(store=store, invoice_date=invoice_date)})

    @extend_schema(request=CalculateInputSerializer, responses={200: CalculateResponseSerializer})
    @action(detail=False, methods=['post'])
    def calculate(self, request):
        """Preview totals without saving anything."""
        serializer = CalculateInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        totals = calculate_total(
            calculate_subtotal(data['items']),
            data['shipping_cost'],
            data['tax_enabled'],
            data['tax_percentage'],
        )
        return Response(CalculateResponseSerializer(totals).data)

    # =========================================================================
    # Reports
    # =========================================================================

    @action(detail=False, methods=['get'], url_path='reports/months', url_name='report-months')
    def report_months(self, request):
        return Response({'months': get_available_report_months(user=request.user)})

    @extend_schema(parameters=[OpenApiParameter('month', str, description='YYYY-MM, previous month when omitted')])
    @action(detail=False, methods=['get'], url_path='reports/monthly', url_name='report-monthly')
    def report_monthly(self, request):
        try:
            report = generate_monthly_report(user=request.user, month_year=request.query_params.get('month'))
        except InvoicesServiceError as e:
            return _service_error_response(e)
        return Response(report)

    @action(detail=False, methods=['get'], url_path='reports/revenue', url_name='report-revenue')
    def report_revenue(self, request):
        return Response(get_revenue_metrics(user=request.user))
