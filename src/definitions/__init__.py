"""ClearlyDefined definitions: request building, response models and decoding."""

from .decoder import decode_definition, decode_definitions
from .models import (
    Attribution,
    DefCoords,
    Definition,
    Description,
    Discovered,
    Facet,
    Facets,
    File,
    Hashes,
    License,
    LicenseScore,
    Scores,
    SourceLocation,
    TopLevelScore,
)
from .request import DefinitionsRequest, build_requests, definitions_url
from .response import GetResponse

__all__ = [
    "Attribution",
    "DefCoords",
    "Definition",
    "DefinitionsRequest",
    "Description",
    "Discovered",
    "Facet",
    "Facets",
    "File",
    "GetResponse",
    "Hashes",
    "License",
    "LicenseScore",
    "Scores",
    "SourceLocation",
    "TopLevelScore",
    "build_requests",
    "decode_definition",
    "decode_definitions",
    "definitions_url",
]
