"""Tests for SubscriptionManager."""

import pytest

from teletask.models.states import StateChange
from teletask.protocol.constants import FunctionType
from teletask.subscriptions import SubscriptionManager


def relay_event(value=0xFF):
    return StateChange(central_unit=1, function_type=FunctionType.RELAY, number=5, value=value)


class TestSubscriptionManager:
    """Tests for callback bookkeeping."""

    @pytest.fixture
    def manager(self):
        return SubscriptionManager()

    def test_first_subscriber_reported(self, manager):
        """Test that only the first callback of a type needs LOG enable."""
        assert manager.add(FunctionType.RELAY, lambda e: None) is True
        assert manager.add(FunctionType.RELAY, lambda e: None) is False
        assert manager.active_types == frozenset({FunctionType.RELAY})

    def test_last_unsubscribe_reported(self, manager):
        """Test that only removing the last callback needs LOG disable."""
        first, second = (lambda e: None), (lambda e: None)
        manager.add(FunctionType.RELAY, first)
        manager.add(FunctionType.RELAY, second)

        assert manager.remove(FunctionType.RELAY, first) is False
        assert manager.remove(FunctionType.RELAY, second) is True
        assert manager.active_types == frozenset()

    def test_duplicate_callback_registered_once(self, manager):
        def callback(event):
            pass

        manager.add(FunctionType.DIMMER, callback)
        manager.add(FunctionType.DIMMER, callback)

        assert manager.callbacks(FunctionType.DIMMER) == (callback,)

    def test_remove_unknown_callback(self, manager):
        assert manager.remove(FunctionType.MOTOR, lambda e: None) is False

    def test_types_are_independent(self, manager):
        callback = lambda e: None  # noqa: E731
        manager.add(FunctionType.RELAY, callback)
        assert manager.add(FunctionType.DIMMER, callback) is True
        assert manager.remove(FunctionType.RELAY, callback) is True
        assert manager.has_subscribers(FunctionType.DIMMER)

    def test_clear(self, manager):
        manager.add(FunctionType.RELAY, lambda e: None)
        manager.clear()
        assert manager.active_types == frozenset()


class TestDispatch:
    """Tests for event fan-out."""

    def test_dispatch_to_matching_type(self):
        manager = SubscriptionManager()
        relay_events, dimmer_events = [], []
        manager.add(FunctionType.RELAY, relay_events.append)
        manager.add(FunctionType.DIMMER, dimmer_events.append)

        assert manager.dispatch(relay_event()) == 1

        assert relay_events == [relay_event()]
        assert dimmer_events == []

    def test_failing_callback_reported(self):
        """Test that a failing callback does not stop the others."""
        errors = []
        received = []
        manager = SubscriptionManager(on_error=errors.append)

        def broken(event):
            raise RuntimeError("boom")

        manager.add(FunctionType.RELAY, broken)
        manager.add(FunctionType.RELAY, received.append)

        assert manager.dispatch(relay_event()) == 2
        assert len(received) == 1
        assert len(errors) == 1
        assert isinstance(errors[0], RuntimeError)

    def test_failing_callback_without_error_channel(self):
        manager = SubscriptionManager()
        manager.add(FunctionType.RELAY, lambda e: 1 / 0)
        manager.dispatch(relay_event())

    def test_repr(self):
        manager = SubscriptionManager()
        manager.add(FunctionType.RELAY, lambda e: None)
        assert repr(manager) == "SubscriptionManager(types=1, callbacks=1)"
