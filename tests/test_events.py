from quizmedia.events import PointerEvents
from quizmedia.models import PointerEvent


def move(x=0, y=0):
    return PointerEvent(type="pointermove", client_x=x, client_y=y)


def test_dispatch_reaches_only_matching_type():
    events = PointerEvents()
    seen = []
    events.add_listener("pointermove", seen.append)
    events.add_listener("pointerup", lambda e: seen.append("up"))

    events.dispatch(move(3, 4))

    assert len(seen) == 1
    assert seen[0].client_x == 3


def test_remove_listener_is_idempotent():
    events = PointerEvents()
    seen = []
    events.add_listener("pointermove", seen.append)
    events.remove_listener("pointermove", seen.append)
    events.remove_listener("pointermove", seen.append)
    events.remove_listener("pointerdown", seen.append)

    events.dispatch(move())

    assert seen == []
    assert events.listener_count("pointermove") == 0


def test_subscription_releases_every_handler_once():
    events = PointerEvents()
    handlers = {"pointermove": lambda e: None, "pointerup": lambda e: None}
    subscription = events.subscribe(handlers)
    assert events.listener_count("pointermove") == 1
    assert events.listener_count("pointerup") == 1

    subscription.release()
    subscription.release()

    assert subscription.active is False
    assert events.listener_count("pointermove") == 0
    assert events.listener_count("pointerup") == 0


def test_subscription_as_context_manager():
    events = PointerEvents()
    with events.subscribe({"pointerdown": lambda e: None}):
        assert events.listener_count("pointerdown") == 1
    assert events.listener_count("pointerdown") == 0


def test_handler_may_unsubscribe_during_dispatch():
    events = PointerEvents()
    calls = []

    def first(event):
        calls.append("first")
        subscription.release()

    def second(event):
        calls.append("second")

    subscription = events.subscribe({"pointermove": first})
    events.add_listener("pointermove", second)

    events.dispatch(move())
    events.dispatch(move())

    assert calls == ["first", "second", "second"]
