"""Writes the wiki artifacts derived from a DoorStatus"""

import json
import os
import tempfile
import threading

from doorstate.artifacts.calendar import CalendarError, next_events
from doorstate.artifacts.sitenav import render_sitenav, sitenav_path
from doorstate.artifacts.spaceapi import build_status, space_info, spaceapi_path


def write_atomic(path, text):
    """Write `text` to a temp file next to `path` and rename it into place."""
    directory = os.path.dirname(path) or '.'
    fd, tmp_path = tempfile.mkstemp(prefix='.doorstate-', dir=directory)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(text)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


class ArtifactRenderer:
    """
    Renders Site.SiteNav and spaceapi.json below the PmWiki directory.

    Both files are written independently: a broken calendar must not keep
    the door indicator from updating and vice versa.  Errors are printed and
    reported through the return value of render(), never raised.

    Renders are serialised by a lock of their own (never the store lock).
    render_store() reads the snapshot while holding it, so a slow render
    cannot finish after, and overwrite, a render of a newer status.

    Parameters
    ----------
    wiki_path    : str        - PmWiki root (contains wiki.d/)
    calendar_dir : str | None - where event pages live, defaults to wiki_path
    space        : dict       - overrides for the static SpaceAPI data
    """

    def __init__(self, wiki_path, calendar_dir=None, space=None):
        self.wiki_path    = wiki_path
        self.calendar_dir = calendar_dir or wiki_path
        self.space        = space_info(space)
        self._render_lock = threading.Lock()

    # ========== PUBLIC API ==========

    def render(self, status):
        """Write both artifacts for `status`. Returns True if both were written."""
        with self._render_lock:
            return self._render_locked(status)

    def render_store(self, store):
        """Write both artifacts for the store's current value, read under the render lock."""
        with self._render_lock:
            return self._render_locked(store.read())

    def write_sitenav(self, status):
        path = sitenav_path(self.wiki_path)
        write_atomic(path, render_sitenav(status))
        return path

    def build_spaceapi(self, status):
        events = next_events(self.calendar_dir)
        return build_status(self.space, status, events)

    def write_spaceapi(self, status):
        document = self.build_spaceapi(status)
        path = spaceapi_path(self.wiki_path)
        write_atomic(path, json.dumps(document))
        return path

    # ========== INTERNAL ==========

    def _render_locked(self, status):
        sitenav_ok  = self._guarded("WIKI", self.write_sitenav, status)
        spaceapi_ok = self._guarded("SPACEAPI", self.write_spaceapi, status)
        return sitenav_ok and spaceapi_ok

    def _guarded(self, tag, writer, status):
        try:
            writer(status)
        except CalendarError as exc:
            print(f"[{tag}] Calendar unavailable, not written: {exc}", flush=True)
            return False
        except OSError as exc:
            print(f"[{tag}] Error writing below {os.path.abspath(self.wiki_path)}: {exc}", flush=True)
            return False
        return True
