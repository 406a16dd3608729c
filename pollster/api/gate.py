"""Path-parameter authorization gate.

A gate is a FastAPI dependency built from a predicate and the name of the
path parameter carrying the resource id. Mounted on a router with
``dependencies=[Depends(gate)]`` it runs before any endpoint in that subtree
and before the endpoint's own parameter validation:

* no caller identity -> 401
* path parameter missing, not ASCII digits or too long for a 64-bit id -> 400
* predicate false -> 403
* predicate raised a store error -> 500, never fail open

Gates on different path parameters compose by mounting both.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pollster.api.deps import get_db_session, resolve_identity
from pollster.obs import AUTHORIZATION_DENIAL_COUNTER
from pollster.services.authorization import Predicate

logger = logging.getLogger(__name__)

# ASCII digits only, small enough for a signed 64-bit column.
_RESOURCE_ID = re.compile(r"[0-9]{1,18}")


@dataclass(frozen=True, slots=True)
class GateConfig:
    predicate: Predicate
    path_param: str


def _deny(reason: str, status_code: int, detail: str) -> HTTPException:
    AUTHORIZATION_DENIAL_COUNTER.labels(reason=reason).inc()
    return HTTPException(status_code=status_code, detail=detail)


def authorization_gate(config: GateConfig) -> Callable[..., int]:
    """Build a dependency enforcing ``config.predicate`` on ``config.path_param``.

    The dependency returns the parsed resource id.
    """

    def gate(
        request: Request,
        user_id: int | None = Depends(resolve_identity),
        session: Session = Depends(get_db_session),
    ) -> int:
        if user_id is None:
            exc = _deny("unauthenticated", status.HTTP_401_UNAUTHORIZED, "Not authenticated")
            exc.headers = {"WWW-Authenticate": "Bearer"}
            raise exc

        raw_id = request.path_params.get(config.path_param)
        if raw_id is None or _RESOURCE_ID.fullmatch(str(raw_id)) is None:
            logger.info("gate on %s rejected malformed id %r", config.path_param, raw_id)
            raise _deny("bad_request", status.HTTP_400_BAD_REQUEST, f"Invalid path parameter '{config.path_param}'")
        resource_id = int(raw_id)

        try:
            allowed = config.predicate(session, user_id, resource_id)
        except SQLAlchemyError as exc:
            logger.exception("authorization predicate failed for %s=%s", config.path_param, resource_id)
            raise _deny("error", status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error") from exc

        if not allowed:
            logger.info("user %s denied on %s=%s", user_id, config.path_param, resource_id)
            raise _deny("forbidden", status.HTTP_403_FORBIDDEN, "Insufficient permissions")
        return resource_id

    gate.__name__ = f"authorization_gate_{config.path_param}"
    return gate


__all__ = ["GateConfig", "authorization_gate"]
