from django.utils import timezone
from rest_framework import viewsets, status, serializers
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .serializers import (
    InvoiceDateInputSerializer,
    PrimaryContactInputSerializer,
    StoreContactSerializer,
    StoreSerializer,
    UserPreferencesSerializer,
)
from .services import (
    create_contact,
    create_store,
    delete_contact,
    delete_store,
    get_contacts,
    get_default_store,
    get_or_create_preferences,
    get_primary_contact,
    get_user_stores,
    next_store_invoice_number,
    reset_invoice_counter,
    set_default_store,
    set_primary_contact,
    update_contact,
    update_preferences,
    update_primary_contact,
    update_store,
    # Exceptions
    ContactNotFoundError,
    InvalidPreferenceError,
    InvalidStoreDataError,
    StoreAccessDenied,
    StoreNotFoundError,
)


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class InvoiceNumberResponseSerializer(serializers.Serializer):
    invoice_number = serializers.CharField()


class StoreViewSet(viewsets.ModelViewSet):
    """
    ViewSet for the owner's stores.

    All business logic is handled by services.

    list: Active stores, oldest first
    create: Create a store (the first one becomes the default)
    retrieve/update/partial_update: Store profile
    destroy: Soft delete
    """

    serializer_class = StoreSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        """Return only the user's active stores."""
        return get_user_stores(user=self.request.user).prefetch_related('contacts')

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            store = create_store(user=request.user, **serializer.validated_data)
        except InvalidStoreDataError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(StoreSerializer(store).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        store = self.get_object()
        serializer = self.get_serializer(store, data=request.data, partial=kwargs.get('partial', False))
        serializer.is_valid(raise_exception=True)

        try:
            store = update_store(store_id=store.id, user=request.user, **serializer.validated_data)
        except InvalidStoreDataError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(StoreSerializer(store).data)

    def destroy(self, request, *args, **kwargs):
        store = self.get_object()
        delete_store(store_id=store.id, user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: StoreSerializer, 404: ErrorResponseSerializer})
    @action(detail=False, methods=['get'])
    def default(self, request):
        """The user's default store."""
        store = get_default_store(user=request.user)
        if store is None:
            return Response({'error': 'No store found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(StoreSerializer(store).data)

    @extend_schema(request=None, responses={200: StoreSerializer})
    @action(detail=True, methods=['post'], url_path='set-default')
    def set_default(self, request, pk=None):
        store = set_default_store(store_id=self.get_object().id, user=request.user)
        return Response(StoreSerializer(store).data)

    @extend_schema(
        methods=['GET'],
        responses={200: StoreContactSerializer(many=True)},
    )
    @extend_schema(
        methods=['POST'],
        request=StoreContactSerializer,
        responses={201: StoreContactSerializer},
    )
    @action(detail=True, methods=['get', 'post'])
    def contacts(self, request, pk=None):
        """List or add the store's signing contacts."""
        store = self.get_object()

        if request.method == 'GET':
            return Response(StoreContactSerializer(get_contacts(store=store), many=True).data)

        serializer = StoreContactSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        contact = create_contact(store_id=store.id, user=request.user, **serializer.validated_data)
        return Response(StoreContactSerializer(contact).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        methods=['GET'],
        responses={200: StoreContactSerializer, 404: ErrorResponseSerializer},
    )
    @extend_schema(
        methods=['PUT'],
        request=PrimaryContactInputSerializer,
        responses={200: StoreContactSerializer},
    )
    @action(detail=True, methods=['get', 'put'], url_path='primary-contact')
    def primary_contact(self, request, pk=None):
        store = self.get_object()

        if request.method == 'GET':
            contact = get_primary_contact(store=store)
            if contact is None:
                return Response({'error': 'No primary contact'}, status=status.HTTP_404_NOT_FOUND)
            return Response(StoreContactSerializer(contact).data)

        serializer = PrimaryContactInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        contact = update_primary_contact(store=store, **serializer.validated_data)
        return Response(StoreContactSerializer(contact).data)

    @extend_schema(request=InvoiceDateInputSerializer, responses={200: InvoiceNumberResponseSerializer})
    @action(detail=True, methods=['post'], url_path='next-invoice-number')
    def next_invoice_number(self, request, pk=None):
        """Consume the store's next invoice number."""
        serializer = InvoiceDateInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        invoice_date = serializer.validated_data.get('invoice_date') or timezone.localdate()

        number = next_store_invoice_number(store=self.get_object(), invoice_date=invoice_date)
        return Response({'invoice_number': number})

    @extend_schema(request=None, responses={200: StoreSerializer})
    @action(detail=True, methods=['post'], url_path='reset-counter')
    def reset_counter(self, request, pk=None):
        store = reset_invoice_counter(store=self.get_object())
        return Response(StoreSerializer(store).data)


# =============================================================================
# Contacts
# =============================================================================

@extend_schema(
    methods=['PATCH'],
    request=StoreContactSerializer,
    responses={200: StoreContactSerializer, 403: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    tags=['stores'],
)
@extend_schema(
    methods=['DELETE'],
    responses={204: None, 403: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    tags=['stores'],
)
@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def contact_detail(request, pk):
    try:
        if request.method == 'DELETE':
            delete_contact(contact_id=pk, user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = StoreContactSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        contact = update_contact(contact_id=pk, user=request.user, **serializer.validated_data)
    except ContactNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except StoreAccessDenied as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    return Response(StoreContactSerializer(contact).data)


@extend_schema(
    request=None,
    responses={200: StoreContactSerializer, 403: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    tags=['stores'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def contact_set_primary(request, pk):
    try:
        contact = set_primary_contact(contact_id=pk, user=request.user)
    except ContactNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except StoreAccessDenied as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    return Response(StoreContactSerializer(contact).data)


# =============================================================================
# Preferences
# =============================================================================

@extend_schema(
    methods=['GET'],
    responses={200: UserPreferencesSerializer},
    tags=['stores'],
)
@extend_schema(
    methods=['PATCH'],
    request=UserPreferencesSerializer,
    responses={200: UserPreferencesSerializer, 400: ErrorResponseSerializer},
    tags=['stores'],
)
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def preferences(request):
    """Display, tax and export preferences of the current user."""
    if request.method == 'GET':
        return Response(UserPreferencesSerializer(get_or_create_preferences(user=request.user)).data)

    serializer = UserPreferencesSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    try:
        prefs = update_preferences(user=request.user, **serializer.validated_data)
    except (InvalidPreferenceError, StoreNotFoundError) as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(UserPreferencesSerializer(prefs).data)
