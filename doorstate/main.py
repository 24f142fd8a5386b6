#!/usr/bin/env python3
"""
doorstate - door switch to MQTT / PmWiki / SpaceAPI bridge

Door status flow
----------------
  switch (optional) --publish--> broker topic "door" (retained)
  broker --subscribe--> StatusStore --> Site.SiteNav + spaceapi.json
  every 5 minutes: StatusStore --> spaceapi.json (fresh calendar events)

Run it on the host with the door switch (`--switch PIN`) and on any other
host that should keep a wiki in sync (without `--switch`).  Both only ever
change their state from what arrives on the broker.
"""

import sys

from doorstate.controllers import DoorController
from doorstate.settings import settings_from_args


def main(argv=None):
    """Load settings, start the workers and supervise them. Returns the exit status."""
    print("\n" + "=" * 50)
    print("  DOORSTATE")
    print("=" * 50 + "\n", flush=True)

    try:
        settings = settings_from_args(argv)
    except (OSError, ValueError) as exc:
        print(f"[SYSTEM] Invalid settings: {exc}", flush=True)
        return 1

    print(f"[SYSTEM] Using pmwiki path: {settings['wiki']['path']}", flush=True)

    controller = None
    try:
        controller = DoorController(settings)
        controller.start()
    except Exception as exc:
        print(f"[SYSTEM] Start-up failed: {exc}", flush=True)
        if controller is not None:
            controller.cleanup()
        return 1

    print("[SYSTEM] Running...", flush=True)
    try:
        error = controller.supervise()
    except KeyboardInterrupt:
        print("\n[SYSTEM] Exiting...", flush=True)
        error = None
    finally:
        controller.cleanup()

    if error is not None:
        print(f"[SYSTEM] Door switch worker died: {error}", flush=True)
        return 1
    print("[SYSTEM] Done.", flush=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
