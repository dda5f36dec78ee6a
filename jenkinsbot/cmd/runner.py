import argparse
import json
import logging
import signal
import sys

from jenkinsbot import bot as b
from jenkinsbot import config as cfg
from jenkinsbot import exceptions as excp
from jenkinsbot import trigger

LOG = logging.getLogger(__name__)
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _setup_logging(verbose):
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(stream=sys.stderr, level=level, format=LOG_FORMAT)
    # Noisy...
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def make_parser():
    parser = argparse.ArgumentParser(
        description="Serve the /jenkins chat slash command.")
    parser.add_argument("-c", "--config", required=True,
                        help="path to the yaml configuration file")
    parser.add_argument("-v", "--verbose", action='store_true',
                        default=False, help="log at debug level")
    parser.add_argument("--show-registration", action='store_true',
                        default=False,
                        help=("print the slash command registration"
                              " details (as json) and exit"))
    return parser


def main(argv=None):
    parser = make_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    if args.show_registration:
        print(json.dumps(trigger.JENKINS.to_dict(), indent=4,
                         sort_keys=True))
        return 0
    try:
        config = cfg.load(args.config)
    except excp.ConfigError as e:
        LOG.error("%s", e)
        return 1
    bot = b.Bot(config)

    def _on_signal(signum, frame):
        LOG.info("Received signal %s, stopping", signum)
        bot.stop()

    signal.signal(signal.SIGTERM, _on_signal)
    signal.signal(signal.SIGINT, _on_signal)
    bot.run()
    return 0


if __name__ == '__main__':
    sys.exit(main())
