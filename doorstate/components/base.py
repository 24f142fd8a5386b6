"""Base component class for hardware components"""


class BaseComponent:
    """
    Base class for hardware components.
    Components hand their observations to a publisher instead of touching
    shared state, so every state change goes through the MQTT broker.
    """

    def __init__(self, code, settings, publisher=None):
        self.code = code
        self.settings = settings
        self.simulate = settings.get('simulate', False)
        self._publisher = publisher

    def set_publisher(self, publisher):
        """Set or replace the MQTT publisher"""
        self._publisher = publisher

    def _publish(self, is_open):
        """Hand a recognised door state to the publisher"""
        if self._publisher is None:
            self._log("No publisher attached - state not sent")
            return
        self._publisher.publish_door_state(is_open)

    def _log(self, message):
        print(f"[{self.code}] {message}", flush=True)

    def cleanup(self):
        """Override in subclasses to release GPIO resources"""
        pass
