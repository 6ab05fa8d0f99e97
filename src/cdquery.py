"""cdquery - look up component definitions on ClearlyDefined.

    Returns:
        int: Exit code
"""
import json
import logging
import sys
from collections.abc import Mapping
from dataclasses import fields, is_dataclass
from datetime import date

import yaml

from args import parse_args
from common.http_client import fetch_definitions
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes, apply_config, load_config
from coordinates.models import CoordVersion
from coordinates.parser import parse_coordinate
from definitions.models import DefCoords
from errors import CoordinateError, HttpError, HttpStatusError, JsonError

logger = logging.getLogger(__name__)


def load_coords_file(file_name):
    """Loads coordinates from a file.

    Blank lines and lines starting with ``#`` are skipped.

    Args:
        file_name (str): File path containing one coordinate per line.

    Returns:
        list: Coordinate strings
    """
    try:
        with open(file_name, encoding='utf-8') as file:
            lines = [line.strip() for line in file]
    except FileNotFoundError as e:
        logging.error("File not found: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    except IOError as e:
        logging.error("IO error: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    return [line for line in lines if line and not line.startswith("#")]


def _camel(name):
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def definition_to_dict(value):
    """Convert a Definition (or any record inside one) to plain JSON data.

    Keys use the service's camelCase spelling; coordinates and versions
    render in their text form.
    """
    if isinstance(value, (DefCoords, CoordVersion)):
        return str(value)
    if is_dataclass(value):
        return {_camel(f.name): definition_to_dict(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [definition_to_dict(v) for v in value]
    if isinstance(value, Mapping):
        return {k: definition_to_dict(v) for k, v in value.items()}
    if isinstance(value, date):
        return value.isoformat()
    return value


def export_json(definitions, path):
    """Exports the definitions to a JSON file.

    Args:
        definitions (list): Decoded definitions.
        path (str): File path to export the JSON.
    """
    data = [definition_to_dict(d) for d in definitions]
    try:
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(data, file, ensure_ascii=False, indent=4)
        logging.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("JSON file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def summary_line(definition):
    """One tab-separated line: coordinate, declared license, effective score."""
    declared = definition.licensed.declared if definition.licensed is not None else "-"
    return f"{definition.coordinates}\t{declared}\t{definition.scores.effective}"


def _setup_logging(args):
    configure_logging(args.LOG_LEVEL)
    if args.LOG_FILE:
        handler = logging.FileHandler(args.LOG_FILE, encoding="utf-8")
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        logging.getLogger().addHandler(handler)


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)

    try:
        load_config(args.CONFIG)
    except (OSError, yaml.YAMLError) as e:
        logging.error("Config file couldn't be loaded: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    if args.CHUNK_SIZE is not None and args.CHUNK_SIZE < 1:
        logging.error("Chunk size must be a positive integer, got %s", args.CHUNK_SIZE)
        sys.exit(ExitCodes.INVALID_INPUT.value)
    # CLI flags win over config file and environment
    apply_config({"root_uri": args.ROOT_URI, "chunk_size": args.CHUNK_SIZE})

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main",
                                target=Constants.ROOT_URI)
        )

    texts = args.COORDINATES or load_coords_file(args.LIST_FROM_FILE)
    if not texts:
        logging.warning("No coordinates found in the input list.")
        sys.exit(ExitCodes.SUCCESS.value)

    try:
        coords = [parse_coordinate(text) for text in texts]
    except CoordinateError as e:
        logging.error("Invalid coordinate: %s", e)
        sys.exit(ExitCodes.INVALID_INPUT.value)

    try:
        definitions = fetch_definitions(coords, chunk_size=Constants.DEFAULT_CHUNK_SIZE)
    except (HttpError, HttpStatusError) as e:
        logging.error("ClearlyDefined request failed: %s", e)
        sys.exit(ExitCodes.CONNECTION_ERROR.value)
    except JsonError as e:
        logging.error("ClearlyDefined response couldn't be decoded: %s", e)
        sys.exit(ExitCodes.INVALID_INPUT.value)

    if not args.QUIET:
        for definition in definitions:
            print(summary_line(definition))

    if args.OUTPUT:
        export_json(definitions, args.OUTPUT)

    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
