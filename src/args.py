"""Argument parsing functionality for gomodgate."""

import argparse
from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program.

    Args:
        argv (list, optional): Argument list; defaults to sys.argv[1:].
    """
    parser = argparse.ArgumentParser(
        prog="gomodgate",
        description=(
            "gomodgate - Go module proxy backed by the local go command"
        ),
        add_help=True,
    )

    parser.add_argument("--listen",
                        dest="LISTEN",
                        help="Service listen address, [host]:port (default: %(default)s)",
                        action="store", type=str,
                        default=Constants.DEFAULT_LISTEN)
    parser.add_argument("--cacheDir", "--cache-dir",
                        dest="CACHE_DIR",
                        help="Go modules cache dir; used as GOPATH for the go command",
                        action="store", type=str)
    parser.add_argument("--whitelist",
                        dest="WHITELIST",
                        help="Path to a file with the whitelist rules",
                        action="store", type=str)
    parser.add_argument("--blacklist",
                        dest="BLACKLIST",
                        help="Path to a file with the blacklist rules",
                        action="store", type=str)
    parser.add_argument("--go",
                        dest="GO_BINARY",
                        help="go command to invoke (default: %(default)s)",
                        action="store", type=str,
                        default=Constants.DEFAULT_GO_BINARY)
    parser.add_argument("--loglevel", "--log-level",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
