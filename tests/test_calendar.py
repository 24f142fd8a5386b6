from datetime import datetime, timedelta
from pathlib import Path

import pytest

from doorstate.artifacts.calendar import CalendarError, CalendarEvent, next_events, parse_event


def event_page(title: str, start: datetime) -> str:
    return (
        "version=pmwiki-2.2.53 ordered=1 urlencoded=1\n"
        "name=Events.Page\n"
        "text=(:Summary: something:)%0a"
        f"StartYear: {start.year}%0aStartMonth: {start.month}%0aStartDay: {start.day}%0a"
        f"StartTime: {start.hour:02d}:{start.minute:02d}%0a"
        "Location: Space%0a(:cellnr:)\n"
        "time=1700000000\n"
        f"title={title}\n"
    )


def write_event(directory: Path, filename: str, title: str, start: datetime) -> None:
    (directory / filename).write_text(event_page(title, start), encoding="utf-8")


def test_parse_event_extracts_name_and_local_start() -> None:
    start = datetime(2024, 5, 3, 19, 30)
    event, parsed_start = parse_event(event_page("Hackabend", start))

    assert parsed_start == start
    assert event == CalendarEvent(name="Hackabend", timestamp=int(start.timestamp()))
    assert event.to_dict() == {"name": "Hackabend", "type": "Event", "timestamp": int(start.timestamp())}


def test_parse_event_ignores_other_pages() -> None:
    assert parse_event("version=1\nname=Main.HomePage\ntext=hello\n") is None


def test_recent_and_future_events_are_selected(tmp_path: Path) -> None:
    now = datetime(2024, 6, 10, 12, 0)
    write_event(tmp_path, "Events.Yesterday", "Yesterday", now - timedelta(hours=20))
    write_event(tmp_path, "Events.NextWeek", "NextWeek", now + timedelta(days=7))
    write_event(tmp_path, "Events.ThreeDaysAgo", "Old", now - timedelta(days=3))

    events = next_events(str(tmp_path), now=now)

    assert [e.name for e in events] == ["Yesterday", "NextWeek"]


def test_default_now_uses_current_time(tmp_path: Path) -> None:
    now = datetime.now()
    write_event(tmp_path, "Events.Soon", "Soon", now + timedelta(days=2))
    write_event(tmp_path, "Events.LongAgo", "LongAgo", now - timedelta(days=30))

    assert [e.name for e in next_events(str(tmp_path))] == ["Soon"]


def test_cutoff_is_exactly_24_hours_and_inclusive(tmp_path: Path) -> None:
    now = datetime(2024, 6, 10, 12, 0)
    write_event(tmp_path, "Events.Edge", "Edge", now - timedelta(hours=24))
    write_event(tmp_path, "Events.JustBefore", "JustBefore", now - timedelta(hours=24, minutes=1))

    assert [e.name for e in next_events(str(tmp_path), now=now)] == ["Edge"]


def test_events_are_sorted_by_start(tmp_path: Path) -> None:
    now = datetime(2024, 6, 10, 12, 0)
    write_event(tmp_path, "Events.A", "Later", now + timedelta(days=5))
    write_event(tmp_path, "Events.B", "Sooner", now + timedelta(days=1))

    assert [e.name for e in next_events(str(tmp_path), now=now)] == ["Sooner", "Later"]


def test_only_event_files_are_scanned(tmp_path: Path) -> None:
    now = datetime(2024, 6, 10, 12, 0)
    write_event(tmp_path, "Main.HomePage", "NotAnEvent", now + timedelta(days=1))

    assert next_events(str(tmp_path), now=now) == []


def test_broken_entries_are_skipped(tmp_path: Path, capsys) -> None:
    now = datetime(2024, 6, 10, 12, 0)
    write_event(tmp_path, "Events.Good", "Good", now + timedelta(days=1))
    (tmp_path / "Events.Garbage").write_text("text=nothing useful\n", encoding="utf-8")
    (tmp_path / "Events.BadDate").write_text(
        event_page("BadDate", now).replace(f"StartMonth: {now.month}%0a", "StartMonth: 13%0a"),
        encoding="utf-8",
    )

    events = next_events(str(tmp_path), now=now)

    assert [e.name for e in events] == ["Good"]
    out = capsys.readouterr().out
    assert "Skipping Events.Garbage" in out
    assert "Skipping Events.BadDate" in out


def test_missing_directory_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(CalendarError):
        next_events(str(tmp_path / "nope"))
