from doorstate.artifacts.calendar import CalendarError, CalendarEvent, next_events
from doorstate.artifacts.renderer import ArtifactRenderer

__all__ = [
    'ArtifactRenderer',
    'CalendarError',
    'CalendarEvent',
    'next_events',
]
