"""Periodic re-rendering of the wiki artifacts"""

import threading


class Refresher:
    """
    Re-renders the artifacts from the current store value every `interval`
    seconds, whether or not the door changed, so the calendar part of the
    SpaceAPI document stays current.

    Read-only with respect to the store.  A failing render is printed and
    retried on the next tick.
    """

    DEFAULT_INTERVAL = 5 * 60

    def __init__(self, store, renderer, interval=DEFAULT_INTERVAL):
        self._store    = store
        self._renderer = renderer
        self.interval  = float(interval)

        self.running = False
        self.thread  = None
        self.ticks   = 0
        self._stop_event = threading.Event()

    def refresh_once(self):
        """Render once from the current snapshot. Returns the renderer's result, False on error."""
        try:
            # the snapshot is taken under the render lock, see ArtifactRenderer.render_store
            return self._renderer.render_store(self._store)
        except Exception as exc:
            print(f"[REFRESH] Render failed: {exc}", flush=True)
            return False
        finally:
            self.ticks += 1

    def start(self):
        if self.running:
            return
        self.running = True
        self._stop_event.clear()
        self.thread = threading.Thread(target=self._loop, name="refresher", daemon=True)
        self.thread.start()
        print(f"[REFRESH] Re-rendering every {self.interval:g}s", flush=True)

    def _loop(self):
        # wait first: start-up rendering is triggered by the retained MQTT message
        while not self._stop_event.wait(self.interval):
            self.refresh_once()
        self.running = False

    def stop(self):
        self._stop_event.set()
        if self.thread:
            self.thread.join(timeout=2)
        self.running = False
