"""

Command line utility generating xml2json_rs integration tests from fixture files.

"""

import argparse
import json
import logging
import sys

from xmljsongen import _version
from xmljsongen.common import GenerationError
from xmljsongen.emitter import DEFAULT_FIXTURE_PREFIX
from xmljsongen.generator import DEFAULT_DATA_DIR, MODES, generate


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser reporting usage errors with exit code 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def create_parser() -> ArgumentParser:
    """Create the command line parser."""
    parser = ArgumentParser(prog='xmljsongen',
                            description='Generate xml2json_rs integration tests from XML and JSON fixtures.')
    parser.add_argument('--version', action='store_true', help='Print the version of xmljsongen.')
    parser.add_argument('--mod', dest='mode', choices=MODES,
                        help="'xml' for XML to JSON parsing tests, 'json' for JSON to XML rendering tests.")
    parser.add_argument('--data-dir', default=DEFAULT_DATA_DIR, help='Directory holding the fixture files.')
    parser.add_argument('--fixture-prefix', default=DEFAULT_FIXTURE_PREFIX,
                        help='Directory the generated tests load fixtures from.')
    parser.add_argument('--header', action='store_true', help='Write the test file preamble before the tests.')
    parser.add_argument('--verbose', action='store_true', help='Log skipped variants and progress to stderr.')
    return parser


def main():
    """Main function for the command line utility."""
    parser = create_parser()
    args = parser.parse_args()

    if args.version:
        print(f'xmljsongen {_version.version}')
        return

    if args.mode is None:
        parser.error('the following arguments are required: --mod')

    logging.basicConfig(stream=sys.stderr, level=logging.INFO if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    try:
        generate(args.mode, data_dir=args.data_dir, out=sys.stdout,
                 fixture_prefix=args.fixture_prefix, header=args.header)
    except (GenerationError, OSError, json.JSONDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
