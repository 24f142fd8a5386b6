import threading

try:
    import RPi.GPIO as GPIO
    RPI_AVAILABLE = True
except (ImportError, RuntimeError):
    # RPi.GPIO raises RuntimeError when imported on something that is not a Pi
    RPI_AVAILABLE = False

from doorstate.components.base import BaseComponent


class DoorSensor(BaseComponent):
    """
    Door switch (DS) - reports debounced open/close transitions.

    Two ways of waiting for the next sample:
      poll : sample every `interval` seconds
      edge : block in GPIO.wait_for_edge() for at most `edge_timeout` seconds,
             a timeout just means "sample again"

    Debouncing is a comparison against the last *recognised* value, so a
    repeated identical sample never results in a publish.  The level seen at
    start-up is always published once.

    In simulation : set_state() changes the level that read() returns.
    In real HW    : GPIO input with internal pull-up; LOW = open by default.
    """

    MODES = ('poll', 'edge')

    def __init__(self, code, settings, publisher=None):
        super().__init__(code, settings, publisher)
        self.pin          = settings.get('pin')
        self.mode         = settings.get('mode', 'poll')
        self.interval     = float(settings.get('interval', 5))
        self.edge_timeout = float(settings.get('edge_timeout', 5))
        self.pull_up      = settings.get('pull_up', True)
        self.active_low   = settings.get('active_low', True)

        if self.mode not in self.MODES:
            raise ValueError(f"Unknown sensor mode {self.mode!r} (expected one of {', '.join(self.MODES)})")

        self.state   = False    # simulated level, True = open
        self.running = False
        self.thread  = None
        self.error   = None     # set when the monitor thread died

        self._last_state = None
        self._wakeup      = threading.Event()   # simulated edge
        self._stopped     = threading.Event()
        self._sample_lock = threading.Lock()
        self._gpio_ready  = False

    # ========== HW SETUP ==========

    def setup(self):
        """Configure the GPIO pin. Failures propagate: a broken sensor is fatal at start-up."""
        if self.simulate or self._gpio_ready:
            return
        if not RPI_AVAILABLE:
            raise RuntimeError("RPi.GPIO is not available - use simulate mode or install the gpio extra")
        if self.pin is None:
            raise ValueError("Sensor pin is not configured")
        GPIO.setmode(GPIO.BCM)
        pud = GPIO.PUD_UP if self.pull_up else GPIO.PUD_DOWN
        GPIO.setup(self.pin, GPIO.IN, pull_up_down=pud)
        self._gpio_ready = True

    # ========== READING ==========

    def read(self):
        """Read current door state (True = open)"""
        if self.simulate:
            return self.state
        level = GPIO.input(self.pin)
        if self.active_low:
            return level == GPIO.LOW
        return level == GPIO.HIGH

    def set_state(self, state):
        """Set door state (for simulation)"""
        self.state = bool(state)
        self._wakeup.set()

    def poll_once(self):
        """
        Take one sample and publish it if it differs from the last recognised
        value. Returns True when a transition was published.

        Read errors are logged and swallowed, publish errors propagate.
        """
        with self._sample_lock:
            try:
                current_state = self.read()
            except Exception as exc:
                self._log(f"Error reading switch pin {self.pin}: {exc}")
                return False

            if current_state == self._last_state:
                return False

            self._log(f"Door {'OPEN' if current_state else 'CLOSED'}")
            self._publish(current_state)
            self._last_state = current_state
            return True

    def last_state(self):
        return self._last_state

    # ========== MONITORING ==========

    def start_monitoring(self):
        """
        Set up the pin, publish the current level and start the monitor thread.
        Setup and the initial publish run in the caller's thread so that their
        failures abort the start-up.
        """
        if self.running:
            return
        self.setup()

        initial = self.read()
        self._log(f"Initial state {'OPEN' if initial else 'CLOSED'} "
                  f"({'SIM' if self.simulate else f'GPIO {self.pin}'}, {self.mode} mode)")
        self._publish(initial)
        self._last_state = initial

        self.error   = None
        self.running = True
        self._stopped.clear()
        self.thread  = threading.Thread(target=self._monitor_loop, name=f"{self.code}-monitor", daemon=True)
        self.thread.start()

    def _wait_for_sample(self):
        """Block until it is time to sample again."""
        if self.mode == 'poll':
            self._stopped.wait(self.interval)
            return

        if self.simulate:
            self._wakeup.wait(self.edge_timeout)
            self._wakeup.clear()
            return

        try:
            # returns None on timeout, which is handled like an edge: sample again
            GPIO.wait_for_edge(self.pin, GPIO.BOTH, timeout=int(self.edge_timeout * 1000))
        except RuntimeError as exc:
            # e.g. "Conflicting edge detection already enabled"; fall back to a timed wait
            self._log(f"Edge wait failed: {exc}")
            self._stopped.wait(self.edge_timeout)

    def _monitor_loop(self):
        """Monitor loop - only publishes on change"""
        try:
            while self.running:
                self._wait_for_sample()
                if not self.running:
                    break
                self.poll_once()
        except Exception as exc:
            self.error = exc
            self._log(f"Monitor stopped: {exc}")
        finally:
            self.running = False

    def is_alive(self):
        return self.thread is not None and self.thread.is_alive()

    # ========== LIFECYCLE ==========

    def stop(self):
        self.running = False
        self._stopped.set()
        self._wakeup.set()
        if self.thread and self.thread is not threading.current_thread():
            self.thread.join(timeout=max(self.interval, self.edge_timeout) + 1)

    def cleanup(self):
        self.stop()
        if self._gpio_ready:
            try:
                GPIO.cleanup(self.pin)
            except RuntimeError as exc:
                self._log(f"GPIO cleanup failed: {exc}")
            self._gpio_ready = False
