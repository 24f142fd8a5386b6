"""
MQTT synchronisation of the door status.

Architecture
------------
The broker is the authority for the door status:

  - The door switch (if this host has one) publishes every recognised
    transition to the status topic (retained, so late subscribers receive
    the last known state immediately).
  - Every instance, including the one with the switch, subscribes to the
    same topic and applies whatever arrives to the StatusStore, then
    re-renders the wiki artifacts.

A local transition therefore only takes effect after the round trip through
the broker, which keeps the store and the retained message in agreement.
Inbound messages are applied in the order they are received, an older
timestamp does not cause a message to be dropped.
"""

import threading

import paho.mqtt.client as mqtt

from doorstate.controllers.status_store import DoorStatus


class PublishError(RuntimeError):
    """A door state could not be handed to the MQTT client."""


class DoorMQTTSync:

    DEFAULT_TOPIC = "door"

    def __init__(self, mqtt_cfg, store, renderer=None):
        """
        Parameters
        ----------
        mqtt_cfg : dict         - broker settings (host, port, topic, qos, ...)
        store    : StatusStore  - updated from every valid inbound message
        renderer : ArtifactRenderer or None - re-rendered after each update
        """
        self._cfg      = mqtt_cfg
        self._store    = store
        self._renderer = renderer

        self.topic      = mqtt_cfg.get('topic', self.DEFAULT_TOPIC)
        self.qos        = int(mqtt_cfg.get('qos', 1))
        self._client_id = mqtt_cfg.get('client_id', 'doorstate')

        self._client    = None
        self._connected = False
        self._connack   = threading.Event()
        self._connect_error = None

    # ========== LIFECYCLE ==========

    def start(self):
        """
        Connect to the broker and start the network thread.
        Raises ConnectionError (or OSError from the socket) if the broker
        cannot be reached or refuses the connection.
        """
        host      = self._cfg.get('host', 'localhost')
        port      = int(self._cfg.get('port', 1883))
        keepalive = int(self._cfg.get('keepalive', 5))
        timeout   = float(self._cfg.get('connect_timeout', 10))

        self._client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=self._client_id,
            clean_session=True,
        )

        user = self._cfg.get('username')
        pwd  = self._cfg.get('password')
        if user:
            self._client.username_pw_set(user, pwd)

        self._client.on_connect    = self._on_connect
        self._client.on_disconnect = self._on_disconnect
        self._client.on_message    = self._on_message

        self._connack.clear()
        self._connect_error = None

        self._client.connect(host, port, keepalive=keepalive)
        self._client.loop_start()          # background network thread

        if not self._connack.wait(timeout):
            self.stop()
            raise ConnectionError(f"No answer from MQTT broker {host}:{port} within {timeout:g}s")
        if self._connect_error is not None:
            self.stop()
            raise ConnectionError(f"MQTT broker {host}:{port} refused connection: {self._connect_error}")

        print(f"[MQTT] Connected to {host}:{port}, topic '{self.topic}'", flush=True)

    def stop(self):
        if self._client:
            self._client.loop_stop()
            try:
                self._client.disconnect()
            except Exception as exc:
                print(f"[MQTT] Disconnect failed: {exc}", flush=True)
        self._connected = False

    # ========== MQTT CALLBACKS ==========

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code.is_failure:
            self._connect_error = reason_code
            print(f"[MQTT] Connection refused ({reason_code})", flush=True)
        else:
            self._connected = True
            # (Re)subscribe on every connect; the retained message delivers the current state
            client.subscribe(self.topic, qos=self.qos)
        self._connack.set()

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        self._connected = False
        if reason_code.is_failure:
            print(f"[MQTT] Unexpected disconnect ({reason_code}), reconnecting", flush=True)

    def _on_message(self, client, userdata, msg):
        if msg.topic != self.topic:
            return
        # an exception raised here would end paho's network thread
        try:
            self.handle_payload(msg.payload)
        except Exception as exc:
            print(f"[MQTT] Dropped message on '{msg.topic}': {exc!r}", flush=True)

    # ========== SUBSCRIBER ==========

    def handle_payload(self, payload):
        """
        Apply one inbound status message. Returns True if the store was updated.

        Malformed payloads are printed and dropped without touching the store.
        """
        try:
            status = DoorStatus.from_json(payload)
        except ValueError as exc:
            print(f"[MQTT] Error parsing incoming message: {exc}", flush=True)
            return False

        print(f"[MQTT] Door status: {status.label()} at {status.timestamp}", flush=True)
        self._store.replace(status)

        if self._renderer is not None:
            try:
                self._renderer.render_store(self._store)
            except Exception as exc:
                print(f"[MQTT] Rendering after update failed: {exc}", flush=True)
        return True

    # ========== PUBLISHER ==========

    def publish_door_state(self, is_open):
        """
        Publish a locally observed door state (retained).

        Raises PublishError when the client rejects the message.  A message
        with QoS > 0 that is only queued because the connection is down is
        sent by paho after reconnecting and is not an error.
        """
        if self._client is None:
            raise PublishError("MQTT client not started")

        status = DoorStatus.now(is_open, flti_only=False)
        info = self._client.publish(self.topic, status.to_json(), qos=self.qos, retain=True)

        if info.rc == mqtt.MQTT_ERR_SUCCESS:
            print(f"[MQTT] Published {status.label()} at {status.timestamp}", flush=True)
            return status
        if info.rc == mqtt.MQTT_ERR_NO_CONN and self.qos > 0:
            print(f"[MQTT] Not connected - {status.label()} queued until reconnect", flush=True)
            return status
        raise PublishError(f"Publishing to '{self.topic}' failed: {mqtt.error_string(info.rc)}")

    # ========== QUERY ==========

    def is_connected(self):
        return self._connected
