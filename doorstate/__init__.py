"""Door switch to MQTT, PmWiki and SpaceAPI bridge"""

__version__ = "0.3.0"
