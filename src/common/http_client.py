"""Blocking HTTP helper for executing definitions requests.

Thin wrapper over ``requests``: sends a prepared DefinitionsRequest and
turns transport failures into HttpError. No retry, caching or pooling
happens here; pass a ``requests.Session`` to reuse connections and
schedule requests concurrently from the caller if needed.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from coordinates.models import Coordinate
from definitions.models import Definition
from definitions.request import DefinitionsRequest, build_requests
from definitions.response import GetResponse
from errors import HttpError

logger = logging.getLogger(__name__)


def send_request(
    request: DefinitionsRequest,
    *,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> requests.Response:
    """Send a prepared request and return the raw response.

    Args:
        request: Request produced by build_requests.
        session: Optional session to send through.
        timeout: Seconds, defaults to Constants.REQUEST_TIMEOUT.

    Raises:
        HttpError: On timeout, connection failure or an invalid request.
    """
    timeout = timeout if timeout is not None else Constants.REQUEST_TIMEOUT
    sender = session if session is not None else requests
    safe_target = safe_url(request.url)
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action=request.method,
                    target=safe_target,
                    count=len(request.coordinates),
                ),
            )
        try:
            res = sender.request(
                request.method,
                request.url,
                data=request.body,
                headers=dict(request.headers),
                timeout=timeout,
            )
        except requests.Timeout as exc:
            logger.error("%s request timed out after %s seconds", safe_target, timeout)
            raise HttpError(f"request to {safe_target} timed out", url=request.url) from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error: %s", safe_target, exc)
            raise HttpError(f"request to {safe_target} failed: {exc}", url=request.url) from exc

    if is_debug_enabled(logger):
        logger.debug(
            "HTTP response",
            extra=extra_context(
                event="http_response",
                component="http_client",
                action=request.method,
                status_code=res.status_code,
                duration_ms=t.duration_ms(),
                target=safe_target,
            ),
        )
    return res


def fetch_definitions(
    coordinates: Iterable[Coordinate],
    *,
    chunk_size: Optional[int] = None,
    root_uri: Optional[str] = None,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> List[Definition]:
    """Look up definitions for all coordinates, one chunk at a time.

    Raises:
        HttpError, HttpStatusError, JsonError: From the first chunk that fails.
    """
    chunk_size = chunk_size if chunk_size is not None else Constants.DEFAULT_CHUNK_SIZE
    definitions: List[Definition] = []
    for request in build_requests(chunk_size, coordinates, root_uri=root_uri):
        res = send_request(request, session=session, timeout=timeout)
        definitions.extend(GetResponse.from_response(res).definitions)
    logger.info("Fetched %d definitions", len(definitions))
    return definitions
