"""
SpaceAPI status document.

Static space information comes from the `spaceapi` settings section, the
state block from the current DoorStatus and the events from the wiki calendar.
"""

import os

SPACEAPI_FILENAME = "spaceapi.json"

API_VERSION       = "0.13"
API_COMPATIBILITY = ["14"]

DEFAULT_SPACE = {
    "space": "[hsmr] - Hackspace Marburg",
    "logo": "https://hsmr.cc/logo.svg",
    "url": "https://hsmr.cc/",
    "location": {
        "address": "[hsmr] Hackspace Marburg, Rudolf-Bultmann-Strasse 2b, 35039 Marburg, Germany",
        "lat": 50.81615,
        "lon": 8.77851,
    },
    "contact": {
        "email": "mail@hsmr.cc",
        "irc": "ircs://irc.hackint.org:6697/#hsmr",
        "ml": "public@lists.hsmr.cc",
        "phone": "+49 6421 4924981",
    },
    "issue_report_channels": ["email", "ml"],
}


def space_info(overrides=None):
    """Merge settings over the defaults (one level deep for location/contact)."""
    info = {key: (dict(value) if isinstance(value, dict) else value)
            for key, value in DEFAULT_SPACE.items()}
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(info.get(key), dict):
            info[key].update(value)
        else:
            info[key] = value
    return info


def build_status(space, status, events):
    """Assemble the SpaceAPI document as a dict."""
    contact = {k: v for k, v in space.get("contact", {}).items() if v}
    document = {
        "api": API_VERSION,
        "api_compatibility": list(API_COMPATIBILITY),
        "space": space["space"],
        "logo": space["logo"],
        "url": space["url"],
        "location": dict(space["location"]),
        "contact": contact,
        "issue_report_channels": list(space.get("issue_report_channels", [])),
        "state": {
            "open": status.door_open,
            "lastchange": status.timestamp,
        },
        "events": [event.to_dict() for event in events],
    }
    return document


def spaceapi_path(wiki_path):
    return os.path.join(wiki_path, SPACEAPI_FILENAME)
