import getopt
import logging
import sys
from typing import List, Tuple

import sentry_sdk
from sentry_sdk.integrations.aiohttp import AioHttpIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from concord import create_app
from concord.config import CONFIG_PATH

USAGE = """Usage: main.py [-D] [-c <config.json>]

  -D, --DEBUG   run with the test token
  -c, --config  path of the JSON config (default: concord/config/config.json)
  -h, --help    show this message"""


def parse_args(argv: List[str]) -> Tuple[bool, str]:
    """Returns ``(debug, config_path)``; exits on ``--help`` or a bad option."""
    debug = False
    config_path = str(CONFIG_PATH)
    try:
        opts, _ = getopt.getopt(argv, "hDc:", ["help", "DEBUG", "config="])
    except getopt.GetoptError as e:
        print(e, USAGE, sep="\n\n")
        sys.exit(2)
    for opt, arg in opts:
        if opt in ("-h", "--help"):
            print(USAGE)
            sys.exit()
        elif opt in ("-D", "--DEBUG"):
            debug = True
        elif opt in ("-c", "--config"):
            config_path = arg
    return debug, config_path


def init_sentry(debug: bool):
    # DSN comes from SENTRY_DSN
    sentry_sdk.init(
        environment="development" if debug else "production",
        traces_sample_rate=1.0,
        integrations=[
            AioHttpIntegration(),
            LoggingIntegration(
                level=logging.INFO,  # Capture info and above as breadcrumbs
                event_level=logging.ERROR,  # Send errors as events
            ),
        ],
    )


def main(argv: list):
    debug, config_path = parse_args(argv)
    init_sentry(debug)
    create_app(debug, config_path)


if __name__ == "__main__":
    main(sys.argv[1:])
