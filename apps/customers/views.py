from rest_framework import viewsets, status, serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.stores.services import get_default_store, StoreAccessDenied, StoreNotFoundError

from .serializers import CustomerSerializer, CustomerCreateSerializer
from .services import (
    create_customer,
    delete_customer,
    get_customer,
    list_customers,
    update_customer,
    CustomerNotFoundError,
)


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class CustomerViewSet(viewsets.ModelViewSet):
    """
    Premium customer book.

    list: Active customers of ?store= (default store when omitted), ?search=
    create: Add a customer to a store the user owns
    retrieve/update/partial_update: Customer details
    destroy: Soft delete

    Free users get 403 with code ``premium_required``.
    """

    serializer_class = CustomerSerializer
    permission_classes = [IsAuthenticated]

    def _store_id(self):
        store_id = self.request.query_params.get('store')
        if store_id:
            return store_id
        store = get_default_store(user=self.request.user)
        return store.id if store else None

    @extend_schema(
        parameters=[
            OpenApiParameter('store', str, description='Store UUID'),
            OpenApiParameter('search', str, description='Match on name, phone or email'),
        ],
        responses={200: CustomerSerializer(many=True), 404: ErrorResponseSerializer},
    )
    def list(self, request, *args, **kwargs):
        store_id = self._store_id()
        if store_id is None:
            return Response({'error': 'No store found'}, status=status.HTTP_404_NOT_FOUND)

        try:
            customers = list_customers(
                user=request.user,
                store_id=store_id,
                search=request.query_params.get('search'),
            )
        except (StoreNotFoundError, StoreAccessDenied) as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(CustomerSerializer(customers, many=True).data)

    @extend_schema(request=CustomerCreateSerializer, responses={201: CustomerSerializer})
    def create(self, request, *args, **kwargs):
        serializer = CustomerCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            customer = create_customer(user=request.user, **serializer.validated_data)
        except StoreNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except StoreAccessDenied as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None, *args, **kwargs):
        try:
            customer = get_customer(customer_id=pk, user=request.user)
        except CustomerNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(CustomerSerializer(customer).data)

    def update(self, request, pk=None, *args, **kwargs):
        serializer = CustomerSerializer(data=request.data, partial=kwargs.get('partial', False))
        serializer.is_valid(raise_exception=True)

        try:
            customer = update_customer(customer_id=pk, user=request.user, **serializer.validated_data)
        except CustomerNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(CustomerSerializer(customer).data)

    def destroy(self, request, pk=None, *args, **kwargs):
        try:
            delete_customer(customer_id=pk, user=request.user)
        except CustomerNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)
