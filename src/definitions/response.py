"""Response handling for the ``POST /definitions`` batch endpoint."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Tuple

from common.logging_utils import extra_context
from errors import HttpStatusError
from .decoder import Payload, decode_definitions
from .models import Definition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GetResponse:
    """The component definitions, one per coordinate that was requested."""
    definitions: Tuple[Definition, ...]

    @classmethod
    def from_parts(cls, status_code: int, body: Payload) -> "GetResponse":
        """Build from a status code and raw body.

        Non-success statuses are reported without looking at the body;
        the service never sends structured errors.

        Raises:
            HttpStatusError: For any status outside 2xx.
            JsonError: If a success body cannot be decoded.
        """
        if not 200 <= status_code < 300:
            logger.warning(
                "HTTP non-2xx received",
                extra=extra_context(
                    event="http_response",
                    component="response",
                    outcome="status_error",
                    status_code=status_code,
                ),
            )
            raise HttpStatusError(status_code)
        return cls(tuple(decode_definitions(body)))

    @classmethod
    def from_response(cls, response: Any) -> "GetResponse":
        """Build from any object exposing ``status_code`` and ``content``,
        such as a ``requests.Response``."""
        return cls.from_parts(response.status_code, response.content)
