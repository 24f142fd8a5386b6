from doorstate.controllers.status_store import DoorStatus, StatusStore
from doorstate.controllers.door_mqtt_sync import DoorMQTTSync, PublishError
from doorstate.controllers.refresher import Refresher
from doorstate.controllers.door_controller import DoorController

__all__ = [
    'DoorStatus',
    'StatusStore',
    'DoorMQTTSync',
    'PublishError',
    'Refresher',
    'DoorController',
]
