import pytest
from dataclasses import FrozenInstanceError
from uuid import uuid4
from django.db import transaction

from apps.core.events import ChangeEvent, change_committed, emit_change


@pytest.fixture
def received():
    events = []

    def receiver(sender, event, **kwargs):
        events.append(event)

    change_committed.connect(receiver, weak=False)
    yield events
    change_committed.disconnect(receiver)


@pytest.mark.django_db
class TestEmitChange:

    def test_dispatched_on_commit(self, received, django_capture_on_commit_callbacks):
        resource_id = uuid4()

        with django_capture_on_commit_callbacks(execute=True):
            emit_change('item', 'purchased', resource_id, purchased_by=resource_id)

        assert len(received) == 1
        event = received[0]
        assert event.name == 'item.purchased'
        assert event.entity == 'item'
        assert event.action == 'purchased'
        assert event.resource_id == str(resource_id)
        assert event.diff == {'purchased_by': str(resource_id)}

    def test_diff_may_carry_its_own_resource_id(self, received, django_capture_on_commit_callbacks):
        share_id, list_id = uuid4(), uuid4()

        with django_capture_on_commit_callbacks(execute=True):
            emit_change('share', 'created', share_id, resource_type='list', resource_id=list_id)

        assert received[0].resource_id == str(share_id)
        assert received[0].diff == {'resource_type': 'list', 'resource_id': str(list_id)}

    def test_not_dispatched_before_commit(self, received, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks() as callbacks:
            emit_change('share', 'created', uuid4())

        assert len(callbacks) == 1
        assert received == []

    def test_rolled_back_transaction_emits_nothing(self, received, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(RuntimeError):
                with transaction.atomic():
                    emit_change('share', 'created', uuid4())
                    raise RuntimeError('abort')

        assert callbacks == []
        assert received == []

    def test_failing_receiver_does_not_break_commit(self, received, django_capture_on_commit_callbacks):
        def broken(sender, event, **kwargs):
            raise RuntimeError('transport down')

        change_committed.connect(broken, weak=False)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                emit_change('reservation', 'released', uuid4())
        finally:
            change_committed.disconnect(broken)

        assert [event.name for event in received] == ['reservation.released']

    def test_event_is_immutable(self):
        event = ChangeEvent(name='list.guest_link_revoked', resource_id='x')

        with pytest.raises(FrozenInstanceError):
            event.name = 'other'
