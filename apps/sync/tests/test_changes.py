from datetime import timedelta

import pytest
from django.utils import timezone

from apps.stores.services import create_store, update_store
from apps.sync.models import ChangeEvent
from apps.sync.services import changes_since, merge_changes


class TestMergeChanges:
    """Tests for folding change events into a record list."""

    def test_insert_appends(self):
        merged = merge_changes(
            [{'id': 1, 'name': 'A'}],
            [{'event': 'INSERT', 'record_id': 2, 'payload': {'id': 2, 'name': 'B'}}],
        )

        assert merged == [{'id': 1, 'name': 'A'}, {'id': 2, 'name': 'B'}]

    def test_insert_of_known_record_is_ignored(self):
        merged = merge_changes(
            [{'id': 1, 'name': 'A'}],
            [{'event': 'INSERT', 'record_id': 1, 'payload': {'id': 1, 'name': 'Other'}}],
        )

        assert merged == [{'id': 1, 'name': 'A'}]

    def test_update_replaces(self):
        merged = merge_changes(
            [{'id': 1, 'name': 'A'}, {'id': 2, 'name': 'B'}],
            [{'event': 'UPDATE', 'record_id': 1, 'payload': {'id': 1, 'name': 'A2'}}],
        )

        assert merged == [{'id': 1, 'name': 'A2'}, {'id': 2, 'name': 'B'}]

    def test_update_of_unknown_record_appends(self):
        merged = merge_changes([], [{'event': 'UPDATE', 'record_id': 'x', 'payload': {'name': 'X'}}])

        assert merged == [{'name': 'X', 'id': 'x'}]

    def test_delete_removes(self):
        merged = merge_changes(
            [{'id': 1}, {'id': 2}],
            [{'event': 'DELETE', 'record_id': '1', 'payload': {}}],
        )

        assert merged == [{'id': 2}]

    def test_events_applied_in_order(self):
        records = [{'id': 1, 'name': 'A'}]
        merged = merge_changes(records, [
            {'event': 'DELETE', 'record_id': 1},
            {'event': 'INSERT', 'record_id': 1, 'payload': {'id': 1, 'name': 'Again'}},
        ])

        assert merged == [{'id': 1, 'name': 'Again'}]
        assert records == [{'id': 1, 'name': 'A'}]


@pytest.mark.django_db
class TestChangeFeed:

    def test_store_writes_are_recorded(self, user):
        store = create_store(user=user, name='Toko Baru')
        update_store(store_id=store.id, user=user, tagline='Baru')

        events = list(changes_since(user=user, tables=['stores']))

        assert [event.event for event in events] == ['INSERT', 'UPDATE']
        assert events[0].record_id == str(store.id)
        assert events[1].payload['tagline'] == 'Baru'

    def test_since_filters_older_events(self, user, store):
        ChangeEvent.objects.filter(user=user).update(created_at=timezone.now() - timedelta(days=1))
        since = timezone.now() - timedelta(hours=1)
        update_store(store_id=store.id, user=user, tagline='Baru')

        events = list(changes_since(user=user, since=since))

        assert len(events) == 1
        assert events[0].event == 'UPDATE'

    def test_other_users_changes_hidden(self, user, other_user):
        create_store(user=other_user, name='Toko Lain')

        assert changes_since(user=user).count() == 0
