"""
Upcoming events scraped from PmWiki event pages.

PmWiki stores pages as key=value lines sorted by key (text, time, title),
with newlines inside values encoded as %0a.  An event page looks like

    text=(:Summary: ...:)%0aStartYear: 2024%0aStartMonth: 5%0aStartDay: 3%0aStartTime: 19:30%0a...
    time=1714750000
    title=Hackabend
"""

import os
import re
from dataclasses import dataclass
from datetime import datetime, timedelta


EVENT_PATTERN = re.compile(
    r"text=.+StartYear: ([0-9]+)%0aStartMonth: ([0-9]+)%0aStartDay: ([0-9]+)"
    r"%0aStartTime: ([0-9]+):([0-9]+)%0a.+\n.+\ntitle=(.+)\n"
)

FILENAME_MARKER = "Event"
LOOKBEHIND      = timedelta(days=1)   # keep yesterday's events too


class CalendarError(Exception):
    """The calendar directory cannot be scanned."""


@dataclass(frozen=True)
class CalendarEvent:
    name: str
    timestamp: int
    type: str = "Event"

    def to_dict(self):
        return {'name': self.name, 'type': self.type, 'timestamp': self.timestamp}


def parse_event(text):
    """
    Parse one PmWiki page. Returns (CalendarEvent, start datetime) or None
    when the page does not look like an event. Impossible dates raise ValueError.
    """
    match = EVENT_PATTERN.search(text)
    if match is None:
        return None
    year, month, day, hour, minute = (int(match.group(i)) for i in range(1, 6))
    # naive datetime: the wiki stores local time
    start = datetime(year, month, day, hour, minute)
    name = match.group(6).strip()
    return CalendarEvent(name=name, timestamp=int(start.timestamp())), start


def next_events(directory, now=None):
    """
    Scan `directory` for event pages and return the events that start no
    earlier than 24 hours before `now`, sorted by start time.

    Raises CalendarError if the directory is missing or unreadable.
    Single pages that cannot be read or parsed are skipped.
    """
    if now is None:
        now = datetime.now()
    if not os.path.isdir(directory):
        raise CalendarError(f"{directory} is not a directory")

    try:
        names = sorted(os.listdir(directory))
    except OSError as exc:
        raise CalendarError(f"Cannot list {directory}: {exc}") from exc

    cutoff = now - LOOKBEHIND
    events = []
    for filename in names:
        if FILENAME_MARKER not in filename:
            continue
        path = os.path.join(directory, filename)
        if not os.path.isfile(path):
            continue
        try:
            with open(path, 'r', encoding='utf-8', errors='replace') as f:
                parsed = parse_event(f.read())
        except (OSError, ValueError) as exc:
            print(f"[CALENDAR] Skipping {filename}: {exc}", flush=True)
            continue
        if parsed is None:
            print(f"[CALENDAR] Skipping {filename}: no event data", flush=True)
            continue

        event, start = parsed
        if start >= cutoff:
            events.append(event)

    events.sort(key=lambda e: (e.timestamp, e.name))
    return events
