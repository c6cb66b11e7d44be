"""
Tests for synchronous change notification.
"""

import gc
import pytest

from nodeconf.config.notifier import ChangeNotifier
from nodeconf.models import DELETED, ChangeEvent


class _Owner:
    pass


@pytest.fixture
def notifier():
    return ChangeNotifier()


def test_notify_in_registration_order(notifier):
    calls = []
    notifier.register(lambda ev: calls.append(("first", ev.key)))
    notifier.register(lambda ev: calls.append(("second", ev.key)))
    notifier.notify(ChangeEvent("s", "k", "v", True))
    assert calls == [("first", "k"), ("second", "k")]


def test_cancel_removes_subscriber(notifier):
    calls = []
    sub = notifier.register(calls.append)
    assert notifier.subscribers == 1
    sub.cancel()
    sub.cancel()
    assert not sub.active
    assert notifier.subscribers == 0
    notifier.notify(ChangeEvent("s", "k", "v", False))
    assert calls == []


def test_owner_collected_removes_subscriber(notifier):
    calls = []
    owner = _Owner()
    sub = notifier.register(calls.append, owner)
    notifier.notify(ChangeEvent("s", "a", "1", False))
    del owner
    gc.collect()
    assert not sub.active
    assert notifier.subscribers == 0
    notifier.notify(ChangeEvent("s", "b", "2", False))
    assert [ev.key for ev in calls] == ["a"]


def test_cancel_during_notify_is_safe(notifier):
    calls = []
    subs = []

    def once(event):
        calls.append(event)
        subs[0].cancel()

    subs.append(notifier.register(once))
    notifier.notify(ChangeEvent("s", "k", "v", False))
    notifier.notify(ChangeEvent("s", "k", "w", False))
    assert len(calls) == 1


def test_subscriber_error_propagates(notifier):
    def boom(event):
        raise ValueError("nope")
    notifier.register(boom)
    with pytest.raises(ValueError):
        notifier.notify(ChangeEvent("s", "k", DELETED, True))


def test_register_rejects_non_callable(notifier):
    with pytest.raises(TypeError):
        notifier.register("not callable")


def test_deleted_marker():
    event = ChangeEvent("s", "k", DELETED, True)
    assert event.deleted
    assert repr(DELETED) == "deleted"
    assert not ChangeEvent("s", "k", "", True).deleted
