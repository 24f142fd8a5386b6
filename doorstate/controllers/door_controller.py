"""Door controller - wires the store, MQTT sync, switch and refresher together"""

import time

from doorstate.artifacts import ArtifactRenderer
from doorstate.components import DoorSensor
from doorstate.controllers.door_mqtt_sync import DoorMQTTSync
from doorstate.controllers.refresher import Refresher
from doorstate.controllers.status_store import StatusStore


class DoorController:
    """
    Owns the single StatusStore and the workers that share it:

      - DoorMQTTSync : paho network thread, the only writer of the store
      - Refresher    : periodic artifact rendering, reads the store
      - DoorSensor   : optional, publishes switch transitions to the broker

    Without a configured switch pin the controller runs in
    no-physical-doorswitch mode (MQTT + refresh only).
    """

    SUPERVISE_INTERVAL = 1.0

    def __init__(self, settings, store=None):
        self.settings = settings
        wiki_cfg      = settings.get("wiki", {})
        mqtt_cfg      = settings.get("mqtt", {})
        sensor_cfg    = settings.get("sensor", {})
        refresh_cfg   = settings.get("refresh", {})

        self.running = False
        self.store   = store or StatusStore()

        self.renderer = ArtifactRenderer(
            wiki_cfg["path"],
            calendar_dir = wiki_cfg.get("calendar_dir"),
            space        = settings.get("spaceapi"),
        )

        self.sync = DoorMQTTSync(mqtt_cfg, self.store, renderer=self.renderer)

        self.refresher = Refresher(
            self.store, self.renderer,
            interval = refresh_cfg.get("interval", Refresher.DEFAULT_INTERVAL),
        )

        self.sensor = None
        if sensor_cfg.get("pin") is not None:
            self.sensor = DoorSensor("DS", sensor_cfg, publisher=self.sync)

    # ========== CONTROL ==========

    def start(self):
        """
        Start all workers. Any exception here is a setup failure
        (broker unreachable, GPIO unavailable) and is left to the caller.
        """
        self.running = True
        self.sync.start()
        self.refresher.start()

        if self.sensor is not None:
            self.sensor.start_monitoring()
        else:
            print("[SYSTEM] Running in no-physical-doorswitch mode", flush=True)

    def supervise(self):
        """
        Block until the switch worker dies. Returns the error that stopped it.
        Without a switch this only returns when stop() is called.
        """
        while self.running:
            if self.sensor is not None and self.sensor.error is not None:
                return self.sensor.error
            time.sleep(self.SUPERVISE_INTERVAL)
        return None

    def stop(self):
        self.running = False
        if self.sensor is not None:
            self.sensor.stop()
        self.refresher.stop()
        self.sync.stop()

    def cleanup(self):
        """Stop workers and release GPIO"""
        self.stop()
        if self.sensor is not None:
            self.sensor.cleanup()

    # ========== STATUS ==========

    def get_status(self):
        status = self.store.read()
        result = {
            "door": status.label(),
            "lastchange": status.timestamp,
            "mqtt": "connected" if self.sync.is_connected() else "disconnected",
        }
        if self.sensor is not None:
            last = self.sensor.last_state()
            result["switch"] = "-" if last is None else ("OPEN" if last else "CLOSED")
        return result
