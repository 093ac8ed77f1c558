from unittest.mock import MagicMock

import pytest

from bigquery_orm.orm.events import AFTER_SAVE, BEFORE_SAVE, EventManager


def test_listeners_receive_keyword_payload_in_order():
    events = EventManager()
    calls = []
    events.on(BEFORE_SAVE, lambda **kw: calls.append(("first", kw["entity"])))
    events.on(BEFORE_SAVE, lambda **kw: calls.append(("second", kw["entity"])))

    events.dispatch(BEFORE_SAVE, entity="e", options=None)

    assert calls == [("first", "e"), ("second", "e")]


def test_unknown_event_is_rejected():
    with pytest.raises(ValueError, match="Unknown event"):
        EventManager().on("before_find", lambda **kw: None)


def test_off_removes_listener():
    events = EventManager()
    listener = MagicMock()
    events.on(AFTER_SAVE, listener)

    events.off(AFTER_SAVE, listener)
    events.dispatch(AFTER_SAVE, entity=None)

    listener.assert_not_called()
    assert events.listeners(AFTER_SAVE) == []


def test_listener_errors_propagate():
    events = EventManager()
    events.on(BEFORE_SAVE, MagicMock(side_effect=RuntimeError("stop")))

    with pytest.raises(RuntimeError, match="stop"):
        events.dispatch(BEFORE_SAVE, entity=None)
