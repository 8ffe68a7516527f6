"""
Where queued writes are replayed.

``LocalTransport`` applies items to this instance's database. When
``SYNC_REMOTE_URL`` is set, ``RemoteTransport`` pushes them to another Invow
server's ``/api/sync/push/`` endpoint instead.
"""

import logging

import httpx
from django.conf import settings

from .exceptions import SyncTransportError
from .replay import apply_item

logger = logging.getLogger(__name__)

HEALTH_ENDPOINT = '/api/health/'
PUSH_ENDPOINT = '/api/sync/push/'


class LocalTransport:
    """Applies items directly; the local database is always reachable."""

    def is_online(self) -> bool:
        return True

    def push(self, item) -> None:
        apply_item(
            user=item.user,
            action=item.action,
            entity_type=item.entity_type,
            entity_id=item.entity_id,
            data=item.data,
        )


class RemoteTransport:
    """
    Pushes items to a remote Invow API.

    Args:
        base_url: API root, defaults to ``settings.SYNC_REMOTE_URL``
        token: Bearer token, defaults to ``settings.SYNC_REMOTE_TOKEN``
        timeout: Seconds per request
        transport: Optional ``httpx`` transport (tests use ``MockTransport``)
    """

    def __init__(self, base_url=None, token=None, timeout=None, transport=None):
        self.base_url = (base_url or settings.SYNC_REMOTE_URL).rstrip('/')
        self.token = token if token is not None else settings.SYNC_REMOTE_TOKEN
        self.timeout = timeout if timeout is not None else settings.SYNC_REMOTE_TIMEOUT
        self.transport = transport

    def _client(self) -> httpx.Client:
        headers = {'Content-Type': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
        )

    def is_online(self) -> bool:
        try:
            with self._client() as client:
                response = client.get(HEALTH_ENDPOINT)
        except httpx.HTTPError as e:
            logger.info("Sync remote unreachable: %s", e)
            return False
        return response.status_code == 200

    def push(self, item) -> None:
        """
        Raises:
            SyncTransportError: If the request fails or the remote rejects the item
        """
        payload = {
            'items': [{
                'action': item.action,
                'entity_type': item.entity_type,
                'entity_id': item.entity_id,
                'data': item.data,
            }],
        }
        try:
            with self._client() as client:
                response = client.post(PUSH_ENDPOINT, json=payload)
        except httpx.HTTPError as e:
            raise SyncTransportError(f"Sync remote unreachable: {e}") from e

        if response.is_error:
            raise SyncTransportError(f"Sync remote error: {response.status_code}")

        try:
            results = response.json().get('results') or []
        except ValueError as e:
            raise SyncTransportError("Sync remote returned invalid JSON") from e

        if not results:
            raise SyncTransportError("Sync remote returned no result")
        if not results[0].get('success'):
            raise SyncTransportError(results[0].get('error') or 'Rejected by sync remote')


def get_transport():
    """Remote transport when ``SYNC_REMOTE_URL`` is configured, local otherwise."""
    if settings.SYNC_REMOTE_URL:
        return RemoteTransport()
    return LocalTransport()
