"""Constants and runtime configuration used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    INVALID_INPUT = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    ROOT_URI = "https://api.clearlydefined.io"
    DEFINITIONS_PATH = "/definitions"
    # Hard limit enforced by the service for a single definitions POST
    MAX_COORDINATES_PER_REQUEST = 1000
    DEFAULT_CHUNK_SIZE = 100
    REQUEST_TIMEOUT = 120  # The definitions endpoint is slow on large batches
    HEADERS_JSON = {"Content-Type": "application/json", "Accept": "application/json"}
    LOG_FORMAT = "[%(levelname)s] %(message)s"

    ENV_ROOT_URI = "CDQUERY_ROOT_URI"
    ENV_CONFIG = "CDQUERY_CONFIG"
    ENV_LOG_LEVEL = "CDQUERY_LOG_LEVEL"


# Config keys and the Constants attribute each one sets
_CONFIG_KEYS = {
    "root_uri": ("ROOT_URI", str),
    "chunk_size": ("DEFAULT_CHUNK_SIZE", int),
    "request_timeout": ("REQUEST_TIMEOUT", float),
}


def apply_config(config: Mapping[str, Any]) -> None:
    """Apply known configuration keys onto Constants.

    Unknown keys are ignored and values that fail conversion are logged
    and skipped, so a partially bad config file still applies the rest.
    """
    for key, value in config.items():
        target = _CONFIG_KEYS.get(key)
        if target is None or value is None:
            continue
        attr, convert = target
        try:
            converted = convert(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid config value for %s: %r", key, value)
            continue
        if attr == "ROOT_URI":
            converted = converted.rstrip("/")
        elif attr == "DEFAULT_CHUNK_SIZE" and converted < 1:
            logger.warning("Ignoring non-positive chunk_size: %r", value)
            continue
        setattr(Constants, attr, converted)


def _load_yaml_config(path: str) -> Mapping[str, Any]:
    """Read a YAML config file and return its top-level mapping.

    Raises:
        OSError: If the file cannot be read.
        yaml.YAMLError: If the file is not valid YAML.
    """
    import yaml  # pylint: disable=import-outside-toplevel

    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        logger.warning("Config file %s does not contain a mapping; ignoring", path)
        return {}
    # Allow the settings to live under a "clearlydefined" section
    section = data.get("clearlydefined")
    return section if isinstance(section, dict) else data


def load_config(path: Optional[str] = None) -> None:
    """Load configuration from a YAML file and the environment.

    Precedence, lowest first: built-in defaults, the YAML file (``path``
    or ``CDQUERY_CONFIG``), then ``CDQUERY_ROOT_URI``.
    """
    path = path or os.environ.get(Constants.ENV_CONFIG)
    if path:
        apply_config(_load_yaml_config(path))
    env_root = os.environ.get(Constants.ENV_ROOT_URI)
    if env_root and env_root.strip():
        apply_config({"root_uri": env_root.strip()})
