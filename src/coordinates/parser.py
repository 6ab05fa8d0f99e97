"""Text parsing and formatting for coordinates, shapes, providers and versions.

The text form is ``shape/provider/namespace-or-dash/name/version[/pr/number]``.
"""

import re
from typing import Iterator, Optional

from errors import CoordinateError
from .models import Coordinate, CoordVersion, Provider, Shape

_PR_MARKER = "pr"
_NO_NAMESPACE = "-"
_PR_NUMBER = re.compile(r"[0-9]+")
_U32_MAX = 2**32 - 1

_SHAPES = {shape.value: shape for shape in Shape}
_PROVIDERS = {provider.value: provider for provider in Provider}


def parse_shape(text: str) -> Shape:
    """Exact, case-sensitive lookup of a shape identifier."""
    try:
        return _SHAPES[text]
    except KeyError:
        raise CoordinateError(f"unknown shape '{text}'", text, "shape") from None


def parse_provider(text: str) -> Provider:
    """Exact, case-sensitive lookup of a provider identifier."""
    try:
        return _PROVIDERS[text]
    except KeyError:
        raise CoordinateError(f"unknown provider '{text}'", text, "provider") from None


def parse_version(text: str) -> CoordVersion:
    return CoordVersion.parse(text)


def _next_segment(segments: Iterator[str], text: str, segment: str) -> str:
    value = next(segments, "")
    if not value:
        raise CoordinateError(f"coordinate '{text}' is missing {segment}", text, segment)
    return value


def _parse_pr_number(value: str, text: str) -> int:
    if not _PR_NUMBER.fullmatch(value) or int(value) > _U32_MAX:
        raise CoordinateError(
            f"coordinate '{text}' has an unparseable PR number '{value}'", text, "pr"
        )
    return int(value)


def parse_coordinate(text: str) -> Coordinate:
    """Parse the canonical text form into a Coordinate.

    Raises:
        CoordinateError: naming the segment that failed.
    """
    segments = iter(text.split("/"))

    shape = parse_shape(_next_segment(segments, text, "shape"))
    provider = parse_provider(_next_segment(segments, text, "provider"))
    namespace: Optional[str] = _next_segment(segments, text, "namespace")
    if namespace == _NO_NAMESPACE:
        namespace = None
    name = _next_segment(segments, text, "name")
    version = parse_version(_next_segment(segments, text, "version"))

    curation_pr = None
    marker = next(segments, None)
    if marker is not None:
        if marker != _PR_MARKER:
            raise CoordinateError(
                f"coordinate '{text}' has unexpected segment '{marker}' after the version",
                text,
                "pr",
            )
        number = next(segments, None)
        if number is None:
            raise CoordinateError(f"coordinate '{text}' is missing the PR number", text, "pr")
        curation_pr = _parse_pr_number(number, text)

    trailing = next(segments, None)
    if trailing is not None:
        raise CoordinateError(
            f"coordinate '{text}' has unexpected trailing segment '{trailing}'",
            text,
            "trailing",
        )

    return Coordinate(
        shape=shape,
        provider=provider,
        namespace=namespace,
        name=name,
        version=version,
        curation_pr=curation_pr,
    )


def format_coordinate(coordinate: Coordinate) -> str:
    """Inverse of parse_coordinate."""
    return str(coordinate)
