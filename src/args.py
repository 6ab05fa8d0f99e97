"""Argument parsing functionality for cdquery."""

import argparse


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="cdquery",
        description=(
            "cdquery - Look up component definitions on ClearlyDefined"
        ),
        add_help=True,
    )

    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument("-c", "--coordinate",
                             dest="COORDINATES",
                             help="Coordinate to look up, e.g. crate/cratesio/-/syn/1.0.14",
                             action="append", type=str)
    input_group.add_argument("-l", "--load_list",
                             dest="LIST_FROM_FILE",
                             help="Load list of coordinates from a file, one per line",
                             action="store", type=str)

    parser.add_argument("--chunk-size",
                        dest="CHUNK_SIZE",
                        help="Coordinates per request (capped at 1000)",
                        action="store", type=int)
    parser.add_argument("--root-uri",
                        dest="ROOT_URI",
                        help="ClearlyDefined API root, e.g. https://api.clearlydefined.io",
                        action="store", type=str)
    parser.add_argument("--config",
                        dest="CONFIG",
                        help="Path to YAML configuration file",
                        action="store", type=str)
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output JSON file",
                        action="store", type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store", type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not output to console.",
                        action="store_true")

    return parser.parse_args(argv)
