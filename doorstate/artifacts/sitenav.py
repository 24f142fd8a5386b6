"""PmWiki Site.SiteNav page with the door indicator"""

import os

SITENAV_RELPATH = os.path.join("wiki.d", "Site.SiteNav")

OPEN_INDICATOR   = "%25green%25besetzt"
CLOSED_INDICATOR = "%25red%25unbesetzt"

SITENAV_TEMPLATE = (
    "version=pmwiki-2.2.53 ordered=1 urlencoded=1\n"
    "name=Site.SiteNav\n"
    "targets=Infrastruktur.ServerB2s\n"
    "text=* [[#door]][[Infrastruktur/Door | %25black%25Base: <br />{indicator}%25%25]]\n"
    "time={timestamp}"
)


def render_sitenav(status):
    """Return the page text for a DoorStatus."""
    indicator = OPEN_INDICATOR if status.door_open else CLOSED_INDICATOR
    return SITENAV_TEMPLATE.format(indicator=indicator, timestamp=status.timestamp)


def sitenav_path(wiki_path):
    return os.path.join(wiki_path, SITENAV_RELPATH)
