from django.utils.dateparse import parse_datetime
from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .serializers import (
    ChangeEventSerializer,
    ImportInputSerializer,
    ImportResultSerializer,
    PushInputSerializer,
    PushResponseSerializer,
    SyncItemInputSerializer,
    SyncQueueItemSerializer,
    SyncResultSerializer,
    SyncStatusSerializer,
)
from .services import (
    REPLAY_ERRORS,
    apply_item,
    changes_since,
    clear,
    enqueue,
    get_all,
    get_sync_service,
    release_sync_service,
    remove,
    sync_local_data,
    # Exceptions
    QueueItemNotFoundError,
)

MAX_CHANGES = 500


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class ClearResponseSerializer(serializers.Serializer):
    removed = serializers.IntegerField()


# =============================================================================
# Queue
# =============================================================================

@extend_schema(
    methods=['GET'],
    responses={200: SyncQueueItemSerializer(many=True)},
    tags=['sync'],
)
@extend_schema(
    methods=['POST'],
    request=SyncItemInputSerializer,
    responses={201: SyncQueueItemSerializer},
    tags=['sync'],
)
@extend_schema(
    methods=['DELETE'],
    responses={200: ClearResponseSerializer},
    tags=['sync'],
)
@api_view(['GET', 'POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def queue(request):
    """Pending offline writes of the current user."""
    if request.method == 'GET':
        return Response(SyncQueueItemSerializer(get_all(user=request.user), many=True).data)

    if request.method == 'DELETE':
        return Response({'removed': clear(user=request.user)})

    serializer = SyncItemInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    item = enqueue(user=request.user, **serializer.validated_data)
    return Response(SyncQueueItemSerializer(item).data, status=status.HTTP_201_CREATED)


@extend_schema(
    responses={204: None, 404: ErrorResponseSerializer},
    tags=['sync'],
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def queue_item(request, pk):
    try:
        remove(user=request.user, item_id=pk)
    except QueueItemNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Replay
# =============================================================================

@extend_schema(request=None, responses={200: SyncResultSerializer}, tags=['sync'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def run(request):
    """Replay the queue now."""
    service = get_sync_service(user=request.user)
    try:
        return Response(service.manual_sync())
    finally:
        release_sync_service(user=request.user)


@extend_schema(responses={200: SyncStatusSerializer}, tags=['sync'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sync_status(request):
    service = get_sync_service(user=request.user)
    try:
        return Response(service.get_status())
    finally:
        release_sync_service(user=request.user)


@extend_schema(
    request=PushInputSerializer,
    responses={200: PushResponseSerializer},
    tags=['sync'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def push(request):
    """
    Apply a batch of writes from an offline client.

    Items are applied in order. A rejected item is reported in its result and
    does not stop the ones after it.
    """
    serializer = PushInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    results = []
    for index, item in enumerate(serializer.validated_data['items']):
        error = None
        try:
            apply_item(user=request.user, **item)
        except REPLAY_ERRORS as e:
            error = str(e)
        results.append({
            'index': index,
            'entity_id': item['entity_id'],
            'success': error is None,
            'error': error,
        })

    return Response({'results': results})


# =============================================================================
# Change feed
# =============================================================================

@extend_schema(
    parameters=[
        OpenApiParameter('since', str, description='ISO timestamp; only later changes are returned'),
        OpenApiParameter('tables', str, description='Comma separated: invoices,stores,customers'),
    ],
    responses={200: ChangeEventSerializer(many=True), 400: ErrorResponseSerializer},
    tags=['sync'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def changes(request):
    since = None
    raw_since = request.query_params.get('since')
    if raw_since:
        since = parse_datetime(raw_since)
        if since is None:
            return Response({'error': 'Invalid since timestamp'}, status=status.HTTP_400_BAD_REQUEST)

    tables = [
        table.strip()
        for table in request.query_params.get('tables', '').split(',')
        if table.strip()
    ]

    events = changes_since(user=request.user, since=since, tables=tables)[:MAX_CHANGES]
    return Response(ChangeEventSerializer(events, many=True).data)


# =============================================================================
# Import
# =============================================================================

@extend_schema(
    request=ImportInputSerializer,
    responses={200: ImportResultSerializer},
    tags=['sync'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def import_local_data(request):
    """Import settings and invoices a client kept before signing up."""
    serializer = ImportInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = sync_local_data(
        user=request.user,
        settings=serializer.validated_data.get('settings'),
        invoices=serializer.validated_data.get('invoices'),
    )
    return Response(result)
