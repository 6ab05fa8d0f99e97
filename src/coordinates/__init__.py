"""Component coordinates and their text form."""

from .models import Coordinate, CoordVersion, Provider, Shape
from .parser import (
    format_coordinate,
    parse_coordinate,
    parse_provider,
    parse_shape,
    parse_version,
)

__all__ = [
    "Coordinate",
    "CoordVersion",
    "Provider",
    "Shape",
    "format_coordinate",
    "parse_coordinate",
    "parse_provider",
    "parse_shape",
    "parse_version",
]
