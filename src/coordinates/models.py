"""Data models for ClearlyDefined coordinates."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import semantic_version


class Shape(Enum):
    """The "type" of a component, i.e. its packaging ecosystem.

    The service knows many more (composer, pod, maven, npm, nuget, pypi,
    gem, sourcearchive, deb, debsrc); add members here as they are needed.
    """
    CRATE = "crate"
    GIT = "git"


class Provider(Enum):
    """Where a component is hosted."""
    CRATESIO = "cratesio"
    GITHUB = "github"


@dataclass(frozen=True)
class CoordVersion:
    """A component revision.

    Most revisions (all of them for crates) are semantic versions, but the
    service stores git SHAs and other ecosystems' schemes in the same
    field, so anything that is not strict semver is kept verbatim.
    """
    value: Union[semantic_version.Version, str]

    @classmethod
    def parse(cls, text: str) -> "CoordVersion":
        """Parse ``text``, preferring strict semver. Never raises for a str."""
        try:
            return cls(semantic_version.Version(text))
        except ValueError:
            return cls(text)

    @property
    def is_semver(self) -> bool:
        return isinstance(self.value, semantic_version.Version)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Coordinate:
    """Coordinates of a specific component.

    For example ``crate/cratesio/-/syn/1.0.14``:

    shape ``crate``: the packaging ecosystem of the component.
    provider ``cratesio``: where the component can be found.
    namespace ``-``: GitHub org, npm scope, Maven group id and so on. The
    segment is always written; ``-`` means the component has none.
    name ``syn``: the simple name of the component.
    version ``1.0.14``: a version or commit id.
    pr: optional number of a curation PR whose changes should be applied
    on top of the harvested and curated data.
    """
    shape: Shape
    provider: Provider
    namespace: Optional[str]
    name: str
    version: CoordVersion
    curation_pr: Optional[int] = None

    def __str__(self) -> str:
        text = "/".join((
            self.shape.value,
            self.provider.value,
            self.namespace if self.namespace is not None else "-",
            self.name,
            str(self.version),
        ))
        if self.curation_pr is not None:
            text += f"/pr/{self.curation_pr}"
        return text
