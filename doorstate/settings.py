import argparse
import json
import os


def load_settings(filePath='settings.json'):
    if not os.path.isabs(filePath):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        filePath = os.path.join(base_dir, filePath)
    with open(filePath, 'r') as f:
        settings = json.load(f)
    return settings


def build_parser():
    parser = argparse.ArgumentParser(
        prog="doorstate",
        description="Door switch to MQTT, PmWiki and SpaceAPI bridge",
    )
    parser.add_argument("--settings", default=None,
                        help="Settings file (default: settings.json next to the package)")
    parser.add_argument("-w", "--wikipath", help="PmWiki directory (contains wiki.d/)")
    parser.add_argument("-b", "--broker", help="MQTT broker host")
    parser.add_argument("-p", "--broker-port", type=int, help="MQTT broker port")
    parser.add_argument("-t", "--topic", help="MQTT topic for the door status")
    parser.add_argument("-s", "--switch", type=int, metavar="PIN",
                        help="BCM pin of the door switch; omit on hosts without a switch")
    parser.add_argument("--simulate", action="store_true",
                        help="Read the switch from a simulated level instead of GPIO")
    return parser


def apply_overrides(settings, args):
    """Copy command line values over the settings file. Returns the merged dict."""
    wiki   = settings.setdefault("wiki", {})
    mqtt   = settings.setdefault("mqtt", {})
    sensor = settings.setdefault("sensor", {})
    settings.setdefault("refresh", {})

    if args.wikipath is not None:
        wiki["path"] = args.wikipath
    if args.broker is not None:
        mqtt["host"] = args.broker
    if args.broker_port is not None:
        mqtt["port"] = args.broker_port
    if args.topic is not None:
        mqtt["topic"] = args.topic
    if args.switch is not None:
        sensor["pin"] = args.switch
    if args.simulate:
        sensor["simulate"] = True
    return settings


def validate_settings(settings):
    """Raise ValueError for settings the process cannot start with."""
    if not settings.get("wiki", {}).get("path"):
        raise ValueError("wiki path is required (--wikipath or wiki.path)")
    if not settings.get("mqtt", {}).get("host"):
        raise ValueError("MQTT broker is required (--broker or mqtt.host)")

    port = settings["mqtt"].get("port", 1883)
    if not isinstance(port, int) or not 0 < port < 65536:
        raise ValueError(f"Broker port must be a 16 bit number, got {port!r}")

    pin = settings.get("sensor", {}).get("pin")
    if pin is not None and (not isinstance(pin, int) or pin < 0):
        raise ValueError(f"Switch pin must be a positive number, got {pin!r}")


def settings_from_args(argv=None):
    """Parse the command line, load the settings file and merge both."""
    args = build_parser().parse_args(argv)
    if args.settings is None:
        raw = load_settings()
    else:
        # a path given on the command line is relative to the working directory
        raw = load_settings(os.path.abspath(args.settings))
    settings = apply_overrides(raw, args)
    validate_settings(settings)
    return settings
