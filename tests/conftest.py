from types import SimpleNamespace

import paho.mqtt.client as mqtt
import pytest

from doorstate.controllers import door_mqtt_sync
from doorstate.controllers.status_store import DoorStatus, StatusStore


class RecordingPublisher:
    """Stands in for DoorMQTTSync on the sensor side."""

    def __init__(self, fail_with=None):
        self.published = []
        self.fail_with = fail_with

    def publish_door_state(self, is_open):
        if self.fail_with is not None:
            raise self.fail_with
        self.published.append(is_open)


class RecordingRenderer:

    def __init__(self, fail_with=None):
        self.rendered = []
        self.fail_with = fail_with

    def render(self, status):
        self.rendered.append(status)
        if self.fail_with is not None:
            raise self.fail_with
        return True

    def render_store(self, store):
        return self.render(store.read())


class FakeMQTTClient:
    """Minimal paho client: connects instantly, records publishes."""

    instances = []
    connect_reason = SimpleNamespace(is_failure=False, value=0)
    publish_rc = mqtt.MQTT_ERR_SUCCESS

    def __init__(self, *args, **kwargs):
        self.args = args
        self.kwargs = kwargs
        self.subscriptions = []
        self.published = []
        self.loop_running = False
        self.credentials = None
        self.on_connect = None
        self.on_disconnect = None
        self.on_message = None
        FakeMQTTClient.instances.append(self)

    def username_pw_set(self, user, pwd):
        self.credentials = (user, pwd)

    def connect(self, host, port, keepalive=60):
        self.address = (host, port, keepalive)

    def loop_start(self):
        self.loop_running = True
        self.on_connect(self, None, {}, self.connect_reason, None)

    def loop_stop(self):
        self.loop_running = False

    def disconnect(self):
        pass

    def subscribe(self, topic, qos=0):
        self.subscriptions.append((topic, qos))

    def publish(self, topic, payload, qos=0, retain=False):
        self.published.append((topic, payload, qos, retain))
        return SimpleNamespace(rc=self.publish_rc)

    def deliver(self, topic, payload):
        if isinstance(payload, str):
            payload = payload.encode()
        self.on_message(self, None, SimpleNamespace(topic=topic, payload=payload))


@pytest.fixture
def fake_mqtt(monkeypatch):
    FakeMQTTClient.instances = []
    monkeypatch.setattr(door_mqtt_sync.mqtt, "Client", FakeMQTTClient)
    return FakeMQTTClient


@pytest.fixture
def store():
    return StatusStore(DoorStatus(door_open=False, timestamp=500, flti_only=None))


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def renderer():
    return RecordingRenderer()
