# -*- coding: utf-8 -*-

"""Answer file requests. Run by the mailer once per inbound session with the
path of the session descriptor it wrote."""


import argparse
import logging
import sys

from freqresponder import Engine, ResponderConfig
from freqresponder.config import config_logging, load_config_file
from freqresponder.exceptions import ResponderError


logger = logging.getLogger('freqrespond')


def main(argv=None):
    args = parse_args(argv)
    try:
        try:
            config = load_config_file(args.config_file)
            config_logging(config.pop('logging', None),
                           logging.DEBUG if args.verbose else logging.WARNING)
            responder_config = ResponderConfig.from_mapping(
                config.pop('responder', None))
        except ResponderError as e:
            logging.basicConfig()  # No-op if logging is already configured
            logger.critical('bad configuration: %s', e)
            return 1
        logger.debug('args: %r', sys.argv)
        logger.debug('responder_config: %r', responder_config)
        engine = Engine(responder_config)
        results = engine.sweep(args.descriptor_files)
        failed = [path for path, result in results.items()
                  if isinstance(result, ResponderError)]
        return 1 if failed else 0
    finally:
        logging.shutdown()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log debug output when the config file has no '
                             'logging section')
    parser.add_argument('config_file', help='path to YAML file')
    parser.add_argument('descriptor_files', nargs='+', metavar='descriptor',
                        help='session descriptor written by the mailer')
    args = parser.parse_args(argv)
    return args


if __name__ == "__main__":
    sys.exit(main())
