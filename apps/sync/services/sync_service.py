"""
Queue replay.

One ``SyncService`` per user drains that user's queue through a transport.
Failed items stay queued with their retry count raised and are dropped once
they reach ``MAX_RETRIES``.
"""

import logging
import threading
import time

from django.conf import settings
from django.db import DatabaseError, close_old_connections

from .exceptions import SyncTransportError
from .queue import get_all, get_count, remove, update_retry
from .replay import REPLAY_ERRORS
from .transports import get_transport

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
BASE_RETRY_DELAY = 1.0  # seconds
INITIAL_SYNC_DELAY = 30.0  # seconds after auto sync starts

SYNC_ERRORS = REPLAY_ERRORS + (SyncTransportError, DatabaseError)


def _empty_result(errors=None) -> dict:
    return {'processed': 0, 'succeeded': 0, 'failed': 0, 'errors': errors or []}


class SyncService:
    """
    Replays a user's queued writes.

    Args:
        user: Owner of the queue
        transport: Where items go, defaults to ``get_transport()``
        sleep: Called with the backoff delay after a failure
    """

    def __init__(self, user, transport=None, sleep=time.sleep):
        self.user = user
        self.transport = transport or get_transport()
        self._sleep = sleep
        self._lock = threading.Lock()
        self._timer = None
        self._interval = None
        self._users = 0

    @property
    def is_syncing(self) -> bool:
        return self._lock.locked()

    @property
    def auto_sync_enabled(self) -> bool:
        return self._timer is not None

    def _push(self, item):
        """Returns the error message, or None when the item was applied."""
        try:
            self.transport.push(item)
        except SYNC_ERRORS as e:
            logger.warning(
                "Sync of %s %s %s failed: %s",
                item.entity_type, item.action, str(item.entity_id)[:8], e,
            )
            return str(e) or e.__class__.__name__
        return None

    def process_queue(self) -> dict:
        """
        Replay every queued item, oldest first.

        Returns:
            dict with ``processed``, ``succeeded``, ``failed`` and ``errors``;
            all zero when another run is in progress
        """
        if not self._lock.acquire(blocking=False):
            logger.info("Sync already running for user %s", str(self.user.id)[:8])
            return _empty_result()

        try:
            if not self.transport.is_online():
                return _empty_result(['Offline'])

            result = _empty_result()
            for item in get_all(user=self.user):
                result['processed'] += 1

                if item.retry_count >= MAX_RETRIES:
                    remove(user=self.user, item_id=item.id)
                    result['failed'] += 1
                    result['errors'].append(
                        f"{item.entity_type} {item.action} failed after {MAX_RETRIES} retries"
                    )
                    continue

                error = self._push(item)
                if error is None:
                    remove(user=self.user, item_id=item.id)
                    result['succeeded'] += 1
                    continue

                delay = BASE_RETRY_DELAY * 2 ** item.retry_count
                update_retry(item=item, error=error)
                result['failed'] += 1
                result['errors'].append(error)
                self._sleep(delay)

            logger.info(
                "Sync for user %s: %d processed, %d succeeded, %d failed",
                str(self.user.id)[:8], result['processed'], result['succeeded'], result['failed'],
            )
            return result
        finally:
            self._lock.release()

    def manual_sync(self) -> dict:
        return self.process_queue()

    # -------------------------------------------------------------------------
    # Auto sync
    # -------------------------------------------------------------------------

    def _schedule(self, delay: float) -> None:
        self._timer = threading.Timer(delay, self._tick)
        self._timer.daemon = True
        self._timer.start()

    def _tick(self) -> None:
        try:
            self.process_queue()
        finally:
            close_old_connections()
            if self._timer is not None:
                self._schedule(self._interval)

    def start_auto_sync(self, interval_minutes: int = None) -> None:
        """Replay the queue periodically in a background timer."""
        if self._timer is not None:
            logger.debug("Auto sync already running for user %s", str(self.user.id)[:8])
            return

        if interval_minutes is None:
            interval_minutes = settings.SYNC_AUTO_INTERVAL_MINUTES
        self._interval = interval_minutes * 60
        self._schedule(min(INITIAL_SYNC_DELAY, self._interval))
        logger.info("Auto sync started for user %s every %s minutes", str(self.user.id)[:8], interval_minutes)

    def stop_auto_sync(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            logger.info("Auto sync stopped for user %s", str(self.user.id)[:8])
        with _services_lock:
            _evict_if_idle(self)

    def get_status(self) -> dict:
        return {
            'is_syncing': self.is_syncing,
            'queue_count': get_count(user=self.user),
            'auto_sync_enabled': self.auto_sync_enabled,
        }


# user id -> SyncService; entries live while in use or auto syncing
_services = {}
_services_lock = threading.Lock()


def _evict_if_idle(service: SyncService) -> None:
    """Caller holds ``_services_lock``."""
    user_id = service.user.id
    if service._users == 0 and not service.auto_sync_enabled and _services.get(user_id) is service:
        del _services[user_id]


def get_sync_service(*, user) -> SyncService:
    """
    The shared SyncService of ``user``, so concurrent requests see one lock.

    Pair every call with ``release_sync_service``.
    """
    with _services_lock:
        service = _services.get(user.id)
        if service is None:
            service = SyncService(user)
            _services[user.id] = service
        else:
            service.user = user
        service._users += 1
        return service


def release_sync_service(*, user) -> None:
    with _services_lock:
        service = _services.get(user.id)
        if service is None:
            return
        service._users = max(service._users - 1, 0)
        _evict_if_idle(service)
