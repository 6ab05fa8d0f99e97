"""Request builder for the ``POST /definitions`` batch endpoint."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Iterator, List, Mapping, Optional, Tuple

from constants import Constants
from coordinates.models import Coordinate
from errors import OtherError


@dataclass(frozen=True)
class DefinitionsRequest:
    """A ready-to-send HTTP request description.

    ``coordinates`` holds the coordinate texts carried in ``body`` so
    callers can correlate responses without re-decoding the body.
    """
    url: str
    body: bytes
    coordinates: Tuple[str, ...]
    method: str = "POST"
    headers: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(dict(Constants.HEADERS_JSON)), hash=False
    )


def definitions_url(root_uri: Optional[str] = None) -> str:
    root = (root_uri or Constants.ROOT_URI).rstrip("/")
    return f"{root}{Constants.DEFINITIONS_PATH}"


def _make_request(url: str, chunk: List[str]) -> DefinitionsRequest:
    body = json.dumps(chunk, separators=(",", ":")).encode("utf-8")
    return DefinitionsRequest(url=url, body=body, coordinates=tuple(chunk))


def _chunked(url: str, chunk_size: int, coordinates: Iterable[Coordinate]) -> Iterator[DefinitionsRequest]:
    chunk: List[str] = []
    for coordinate in coordinates:
        chunk.append(str(coordinate))
        if len(chunk) == chunk_size:
            yield _make_request(url, chunk)
            chunk = []
    if chunk:
        yield _make_request(url, chunk)


def build_requests(
    chunk_size: int,
    coordinates: Iterable[Coordinate],
    root_uri: Optional[str] = None,
) -> Iterator[DefinitionsRequest]:
    """Group coordinates into definitions requests.

    The service caps a single request at 1000 coordinates and is slow on
    large batches, so pick a moderate chunk size and send the requests in
    parallel if latency matters. Chunks are cut purely by count; the last
    one may be partial. The input is consumed lazily.

    Args:
        chunk_size: Requested coordinates per request, capped at 1000.
        coordinates: Any iterable of Coordinate.
        root_uri: Service root, defaults to Constants.ROOT_URI.

    Raises:
        OtherError: If chunk_size is less than 1.
    """
    if chunk_size < 1:
        raise OtherError(f"chunk size must be positive, got {chunk_size}")
    size = min(chunk_size, Constants.MAX_COORDINATES_PER_REQUEST)
    return _chunked(definitions_url(root_uri), size, coordinates)
