"""
Door status value and the thread-safe store that holds it.

The store keeps exactly one DoorStatus for the whole process.  Writers never
touch single fields: every update swaps the complete (immutable) value, so a
reader always gets a snapshot where door_open and timestamp belong together.
"""

import json
import threading
import time
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DoorStatus:
    """Open/closed flag plus the unix time of the last change."""

    door_open: bool
    timestamp: int
    flti_only: Optional[bool] = None   # passed through untouched

    @classmethod
    def now(cls, door_open, flti_only=None):
        return cls(door_open=bool(door_open), timestamp=int(time.time()), flti_only=flti_only)

    @classmethod
    def from_json(cls, payload):
        """
        Parse an MQTT payload (bytes or str).

        Raises ValueError for anything that is not
        {"door_open": bool, "timestamp": int >= 0, "flti_only": bool|null}.
        """
        if isinstance(payload, (bytes, bytearray)):
            payload = payload.decode('utf-8')   # UnicodeDecodeError is a ValueError
        try:
            data = json.loads(payload)
        except RecursionError:
            raise ValueError("JSON nested too deeply") from None

        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")

        door_open = data.get('door_open')
        if not isinstance(door_open, bool):
            raise ValueError(f"door_open must be a boolean, got {door_open!r}")

        timestamp = data.get('timestamp')
        # bool is an int subclass; true/false is not a timestamp
        if isinstance(timestamp, bool) or not isinstance(timestamp, int) or timestamp < 0:
            raise ValueError(f"timestamp must be a non-negative integer, got {timestamp!r}")

        flti_only = data.get('flti_only')
        if flti_only is not None and not isinstance(flti_only, bool):
            raise ValueError(f"flti_only must be a boolean or null, got {flti_only!r}")

        return cls(door_open=door_open, timestamp=timestamp, flti_only=flti_only)

    def to_dict(self):
        return {
            'door_open': self.door_open,
            'timestamp': self.timestamp,
            'flti_only': self.flti_only,
        }

    def to_json(self):
        return json.dumps(self.to_dict())

    def label(self):
        return "OPEN" if self.door_open else "CLOSED"


class StatusStore:
    """
    Single source of truth for the door status.

    The lock only guards the reference swap / copy; callers must do their I/O
    (MQTT, file writes) after read() or replace() returned.
    """

    def __init__(self, initial=None):
        self._lock   = threading.Lock()
        self._status = initial if initial is not None else DoorStatus.now(False)

    def read(self):
        """Return the current snapshot."""
        with self._lock:
            return self._status

    def replace(self, status):
        """Swap in a complete new status."""
        if not isinstance(status, DoorStatus):
            raise TypeError(f"expected DoorStatus, got {type(status).__name__}")
        with self._lock:
            self._status = status
