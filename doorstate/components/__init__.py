from doorstate.components.base import BaseComponent
from doorstate.components.door_sensor import DoorSensor

__all__ = [
    'BaseComponent',
    'DoorSensor',
]
