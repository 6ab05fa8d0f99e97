"""Data models mirroring the ClearlyDefined definition schema.

Every record is an immutable snapshot of one response. Sequences are
tuples; optional sub-objects are ``None`` when the service omitted them
or, for ``described``/``licensed``, when it has not processed the
component yet.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Mapping, Optional, Tuple

from coordinates.models import Coordinate, CoordVersion, Provider, Shape


@dataclass(frozen=True)
class DefCoords:
    """Coordinates as echoed back inside a definition."""
    shape: Shape
    provider: Provider
    name: str
    revision: CoordVersion
    namespace: Optional[str] = None

    def to_coordinate(self) -> Coordinate:
        return Coordinate(
            shape=self.shape,
            provider=self.provider,
            namespace=self.namespace,
            name=self.name,
            version=self.revision,
        )

    def __str__(self) -> str:
        return str(self.to_coordinate())


@dataclass(frozen=True)
class Hashes:
    sha1: str
    sha256: Optional[str] = None


@dataclass(frozen=True)
class Scores:
    total: int
    date: int
    source: int


@dataclass(frozen=True)
class SourceLocation:
    type: str
    provider: str
    namespace: str
    name: str
    revision: str
    url: str


@dataclass(frozen=True)
class Description:
    """The ``described`` section: where the component came from."""
    release_date: date
    # read-only, excluded from the hash
    urls: Mapping[str, str] = field(hash=False)
    hashes: Hashes
    files: int
    tools: Tuple[str, ...]
    tool_score: Scores
    score: Scores
    source_location: Optional[SourceLocation] = None
    project_website: Optional[str] = None


@dataclass(frozen=True)
class LicenseScore:
    total: int
    declared: int
    discovered: int
    consistency: int
    spdx: int
    texts: int


@dataclass(frozen=True)
class Attribution:
    unknown: int
    parties: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Discovered:
    unknown: int
    expressions: Tuple[str, ...]


@dataclass(frozen=True)
class Facet:
    attribution: Attribution
    discovered: Discovered
    files: int


@dataclass(frozen=True)
class Facets:
    core: Facet


@dataclass(frozen=True)
class License:
    """The ``licensed`` section: declared and discovered licensing."""
    declared: str
    facets: Facets
    tool_score: LicenseScore
    score: LicenseScore


@dataclass(frozen=True)
class File:
    path: str
    hashes: Optional[Hashes] = None
    license: Optional[str] = None
    attributions: Tuple[str, ...] = ()
    natures: Tuple[str, ...] = ()
    token: Optional[str] = None


@dataclass(frozen=True)
class TopLevelScore:
    effective: int = 0
    tool: int = 0


@dataclass(frozen=True)
class Definition:
    """Everything the service knows about one coordinate."""
    coordinates: DefCoords
    # None when the component has not been harvested yet
    described: Optional[Description]
    licensed: Optional[License]
    files: Tuple[File, ...] = ()
    scores: TopLevelScore = field(default_factory=TopLevelScore)
