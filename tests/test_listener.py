import pytest

from ringguard.classifier import NotificationClassifier
from ringguard.listener import NotificationListener
from ringguard.models import NotificationEvent, TrustedContact


class FakeOverride:
    def __init__(self, fail=False):
        self.calls = 0
        self.fail = fail

    def force_audible(self):
        self.calls += 1
        if self.fail:
            raise RuntimeError("audio service gone")


class FakeActuator:
    def __init__(self):
        self.triggers = 0

    def trigger(self):
        self.triggers += 1
        return True


MOM = TrustedContact("Mom", "+15550001111")


def _call_from(title, source="com.whatsapp"):
    return NotificationEvent(
        source_identifier=source, title=title, body_text="Incoming voice call"
    )


@pytest.fixture
def wiring():
    state = {"contacts": [MOM], "enabled": True}
    override = FakeOverride()
    actuator = FakeActuator()
    listener = NotificationListener(
        NotificationClassifier(),
        contacts=lambda: state["contacts"],
        monitoring_enabled=lambda: state["enabled"],
        override=override,
        actuator=actuator,
    )
    yield listener, override, actuator, state
    listener.shutdown()


def test_trusted_call_overrides_then_alerts(wiring):
    listener, override, actuator, _ = wiring
    future = listener.on_notification_posted(_call_from("Mom"))
    assert future is not None
    assert future.result(timeout=2) is True
    assert override.calls == 1
    assert actuator.triggers == 1


def test_unknown_caller_is_ignored(wiring):
    listener, override, actuator, _ = wiring
    assert listener.on_notification_posted(_call_from("Telemarketer")) is None
    assert override.calls == 0
    assert actuator.triggers == 0


def test_paused_monitoring_ignores_everything(wiring):
    listener, override, actuator, state = wiring
    state["enabled"] = False
    assert listener.on_notification_posted(_call_from("Mom")) is None
    assert actuator.triggers == 0


def test_unmonitored_source_is_ignored(wiring):
    listener, _, actuator, _ = wiring
    event = _call_from("Mom", source="org.example.callapp")
    assert listener.on_notification_posted(event) is None
    assert actuator.triggers == 0


def test_empty_contact_list_never_alerts(wiring):
    listener, _, actuator, state = wiring
    state["contacts"] = []
    assert listener.on_notification_posted(_call_from("Mom")) is None
    assert actuator.triggers == 0


def test_missing_event_or_source_is_ignored(wiring):
    listener, _, _, _ = wiring
    assert listener.on_notification_posted(None) is None
    assert listener.on_notification_posted(NotificationEvent(source_identifier="")) is None


def test_override_failure_still_alerts():
    override = FakeOverride(fail=True)
    actuator = FakeActuator()
    listener = NotificationListener(
        NotificationClassifier(),
        contacts=lambda: [MOM],
        monitoring_enabled=lambda: True,
        override=override,
        actuator=actuator,
    )
    try:
        future = listener.on_notification_posted(_call_from("Mom"))
        assert future.result(timeout=2) is True
        assert actuator.triggers == 1
    finally:
        listener.shutdown()


def test_connection_lifecycle(wiring):
    listener, _, _, _ = wiring
    assert not listener.connected
    listener.on_listener_connected()
    assert listener.connected
    listener.on_listener_disconnected()
    assert not listener.connected
