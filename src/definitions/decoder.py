"""Decoding of ClearlyDefined definition payloads.

Decoding runs in two phases. The payload is first parsed into plain JSON
values, with every object remembering which keys it saw more than once.
Each record is then decoded strictly from those values: unknown keys are
ignored, missing required keys, duplicated known keys and mistyped values
are errors.

Definition objects are the exception. The service does not answer with a
404 or null for a component it has not finished analyzing; it returns a
definition whose ``described`` and ``licensed`` sections are degenerate.
Those two sections are therefore decoded on their own and become ``None``
when they fail, while the keys themselves must still be present.
"""
from __future__ import annotations

import json
import logging
import re
from datetime import date
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Tuple, TypeVar, Union

from common.logging_utils import extra_context, is_debug_enabled
from coordinates.models import CoordVersion
from coordinates.parser import parse_provider, parse_shape
from errors import CoordinateError, JsonError
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

logger = logging.getLogger(__name__)

T = TypeVar("T")
Decoder = Callable[[Any, str], T]

Payload = Union[bytes, bytearray, str]

_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_NO_NAMESPACE = "-"


class FieldError(ValueError):
    """A JSON value did not match the shape of the record being decoded."""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class _JsonObject(dict):
    """A decoded JSON object that remembers its repeated keys."""

    duplicates: FrozenSet[str] = frozenset()


def _object_pairs(pairs: List[Tuple[str, Any]]) -> _JsonObject:
    obj = _JsonObject()
    repeated = set()
    for key, value in pairs:
        if key in obj:
            repeated.add(key)
        obj[key] = value
    obj.duplicates = frozenset(repeated)
    return obj


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON number {name}")


def loads(payload: Payload) -> Any:
    """Parse raw JSON, tracking duplicate keys.

    Raises:
        JsonError: If the payload is not valid UTF-8 JSON.
    """
    try:
        return json.loads(
            payload,
            object_pairs_hook=_object_pairs,
            parse_constant=_reject_constant,
        )
    except ValueError as exc:  # JSONDecodeError and UnicodeDecodeError
        raise JsonError(f"malformed JSON payload: {exc}") from exc
    except RecursionError as exc:
        raise JsonError("malformed JSON payload: nesting too deep") from exc


# --- scalar decoders -------------------------------------------------------

def _string(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise FieldError(path, f"invalid type: expected a string, got {type(value).__name__}")
    return value


def _uint(bits: int) -> Decoder[int]:
    upper = 2**bits - 1

    def decode(value: Any, path: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise FieldError(path, f"invalid type: expected u{bits}, got {type(value).__name__}")
        if not 0 <= value <= upper:
            raise FieldError(path, f"invalid value: {value} is out of range for u{bits}")
        return value

    return decode


_u8 = _uint(8)
_u32 = _uint(32)


def _list_of(item: Decoder[T]) -> Decoder[Tuple[T, ...]]:
    def decode(value: Any, path: str) -> Tuple[T, ...]:
        if not isinstance(value, list):
            raise FieldError(path, f"invalid type: expected a sequence, got {type(value).__name__}")
        return tuple(item(entry, f"{path}[{index}]") for index, entry in enumerate(value))

    return decode


_strings = _list_of(_string)


def _string_map(value: Any, path: str) -> Mapping[str, str]:
    if not isinstance(value, dict):
        raise FieldError(path, f"invalid type: expected a map, got {type(value).__name__}")
    return MappingProxyType({key: _string(entry, f"{path}.{key}") for key, entry in value.items()})


def _date(value: Any, path: str) -> date:
    text = _string(value, path)
    if _DATE.fullmatch(text):
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass  # e.g. 2020-02-30
    raise FieldError(path, f"invalid date '{text}'")


def _shape(value: Any, path: str):
    try:
        return parse_shape(_string(value, path))
    except CoordinateError as exc:
        raise FieldError(path, str(exc)) from exc


def _provider(value: Any, path: str):
    try:
        return parse_provider(_string(value, path))
    except CoordinateError as exc:
        raise FieldError(path, str(exc)) from exc


def _revision(value: Any, path: str) -> CoordVersion:
    return CoordVersion.parse(_string(value, path))


# --- record decoders -------------------------------------------------------

class _Fields:
    """Typed access to the fields of one JSON object."""

    def __init__(self, value: Any, path: str, expected: str, known: FrozenSet[str]):
        if not isinstance(value, dict):
            raise FieldError(path, f"invalid type: expected {expected}, got {type(value).__name__}")
        repeated = getattr(value, "duplicates", frozenset()) & known
        if repeated:
            raise FieldError(path, f"duplicate field `{sorted(repeated)[0]}`")
        self.obj = value
        self.path = path

    def _child(self, key: str) -> str:
        return f"{self.path}.{key}"

    def required(self, key: str, decode: Decoder[T]) -> T:
        if key not in self.obj:
            raise FieldError(self.path, f"missing field `{key}`")
        return decode(self.obj[key], self._child(key))

    def optional(self, key: str, decode: Decoder[T]) -> Optional[T]:
        value = self.obj.get(key)
        if value is None:
            return None
        return decode(value, self._child(key))

    def default(self, key: str, decode: Decoder[T], fallback: T) -> T:
        if key not in self.obj:
            return fallback
        return decode(self.obj[key], self._child(key))


def _hashes(value: Any, path: str) -> Hashes:
    f = _Fields(value, path, "struct Hashes", frozenset({"sha1", "sha256"}))
    return Hashes(sha1=f.required("sha1", _string), sha256=f.optional("sha256", _string))


def _scores(value: Any, path: str) -> Scores:
    f = _Fields(value, path, "struct Scores", frozenset({"total", "date", "source"}))
    return Scores(
        total=f.required("total", _u32),
        date=f.required("date", _u32),
        source=f.required("source", _u32),
    )


_SOURCE_LOCATION_FIELDS = ("type", "provider", "namespace", "name", "revision", "url")


def _source_location(value: Any, path: str) -> SourceLocation:
    f = _Fields(value, path, "struct SourceLocation", frozenset(_SOURCE_LOCATION_FIELDS))
    return SourceLocation(**{key: f.required(key, _string) for key in _SOURCE_LOCATION_FIELDS})


def _description(value: Any, path: str) -> Description:
    f = _Fields(value, path, "struct Description", frozenset({
        "releaseDate", "sourceLocation", "projectWebsite", "urls", "hashes",
        "files", "tools", "toolScore", "score",
    }))
    return Description(
        release_date=f.required("releaseDate", _date),
        source_location=f.optional("sourceLocation", _source_location),
        project_website=f.optional("projectWebsite", _string),
        urls=f.required("urls", _string_map),
        hashes=f.required("hashes", _hashes),
        files=f.required("files", _u32),
        tools=f.required("tools", _strings),
        tool_score=f.required("toolScore", _scores),
        score=f.required("score", _scores),
    )


_LICENSE_SCORE_FIELDS = ("total", "declared", "discovered", "consistency", "spdx", "texts")


def _license_score(value: Any, path: str) -> LicenseScore:
    f = _Fields(value, path, "struct LicenseScore", frozenset(_LICENSE_SCORE_FIELDS))
    return LicenseScore(**{key: f.required(key, _u32) for key in _LICENSE_SCORE_FIELDS})


def _attribution(value: Any, path: str) -> Attribution:
    f = _Fields(value, path, "struct Attribution", frozenset({"unknown", "parties"}))
    return Attribution(
        unknown=f.required("unknown", _u32),
        parties=f.default("parties", _strings, ()),
    )


def _discovered(value: Any, path: str) -> Discovered:
    f = _Fields(value, path, "struct Discovered", frozenset({"unknown", "expressions"}))
    return Discovered(
        unknown=f.required("unknown", _u32),
        expressions=f.required("expressions", _strings),
    )


def _facet(value: Any, path: str) -> Facet:
    f = _Fields(value, path, "struct Facet", frozenset({"attribution", "discovered", "files"}))
    return Facet(
        attribution=f.required("attribution", _attribution),
        discovered=f.required("discovered", _discovered),
        files=f.required("files", _u32),
    )


def _facets(value: Any, path: str) -> Facets:
    f = _Fields(value, path, "struct Facets", frozenset({"core"}))
    return Facets(core=f.required("core", _facet))


def _license(value: Any, path: str) -> License:
    f = _Fields(value, path, "struct License", frozenset({
        "declared", "facets", "toolScore", "score",
    }))
    return License(
        declared=f.required("declared", _string),
        facets=f.required("facets", _facets),
        tool_score=f.required("toolScore", _license_score),
        score=f.required("score", _license_score),
    )


def _file(value: Any, path: str) -> File:
    f = _Fields(value, path, "struct File", frozenset({
        "path", "hashes", "license", "attributions", "natures", "token",
    }))
    return File(
        path=f.required("path", _string),
        hashes=f.optional("hashes", _hashes),
        license=f.optional("license", _string),
        attributions=f.default("attributions", _strings, ()),
        natures=f.default("natures", _strings, ()),
        token=f.optional("token", _string),
    )


def _top_level_score(value: Any, path: str) -> TopLevelScore:
    f = _Fields(value, path, "struct TopLevelScore", frozenset({"effective", "tool"}))
    return TopLevelScore(effective=f.required("effective", _u8), tool=f.required("tool", _u8))


def _def_coords(value: Any, path: str) -> DefCoords:
    f = _Fields(value, path, "struct DefCoords", frozenset({
        "type", "provider", "namespace", "name", "revision",
    }))
    namespace = f.optional("namespace", _string)
    return DefCoords(
        shape=f.required("type", _shape),
        provider=f.required("provider", _provider),
        namespace=None if namespace == _NO_NAMESPACE else namespace,
        name=f.required("name", _string),
        revision=f.required("revision", _revision),
    )


_DEFINITION_FIELDS = frozenset({"coordinates", "described", "licensed", "files", "scores"})


def _tolerant(f: _Fields, key: str, decode: Decoder[T]) -> Optional[T]:
    """Decode a section that may be degenerate; the key itself is required."""
    if key not in f.obj:
        raise FieldError(f.path, f"missing field `{key}`")
    try:
        return decode(f.obj[key], f"{f.path}.{key}")
    except FieldError as exc:
        if is_debug_enabled(logger):
            logger.debug(
                "Discarding unparseable section",
                extra=extra_context(
                    event="decode",
                    component="decoder",
                    action=key,
                    outcome="discarded",
                    target=f.path,
                    reason=str(exc),
                ),
            )
        return None


def _definition(value: Any, path: str) -> Definition:
    f = _Fields(value, path, "struct Definition", _DEFINITION_FIELDS)
    return Definition(
        coordinates=f.required("coordinates", _def_coords),
        described=_tolerant(f, "described", _description),
        licensed=_tolerant(f, "licensed", _license),
        files=f.default("files", _list_of(_file), ()),
        scores=f.default("scores", _top_level_score, TopLevelScore()),
    )


# --- public API ------------------------------------------------------------

def decode_definition(payload: Payload) -> Definition:
    """Decode a single definition object.

    Raises:
        JsonError: On malformed JSON or a fatal field error.
    """
    value = loads(payload)
    try:
        return _definition(value, "definition")
    except FieldError as exc:
        raise JsonError(str(exc)) from exc


def decode_definitions(payload: Payload) -> List[Definition]:
    """Decode a batch response mapping coordinate text to definition.

    Definitions are returned in the order they appear in the payload;
    callers should not attach meaning to that order. Any fatal error in
    one definition aborts the whole batch.

    Raises:
        JsonError: On malformed JSON, a non-object payload or a fatal
            field error in any definition.
    """
    value = loads(payload)
    if not isinstance(value, dict):
        raise JsonError(
            f"invalid type: expected a map of coordinates to definitions, got {type(value).__name__}"
        )
    try:
        definitions = [_definition(entry, key) for key, entry in value.items()]
    except FieldError as exc:
        raise JsonError(str(exc)) from exc

    if is_debug_enabled(logger):
        logger.debug(
            "Decoded definitions",
            extra=extra_context(
                event="parse",
                component="decoder",
                action="decode_definitions",
                outcome="success",
                count=len(definitions),
            ),
        )
    return definitions
