# scan2eat/deps.py
from __future__ import annotations

import logging
from typing import Iterable

from fastapi import Depends, Request

from scan2eat.core.config import ACCESS_TOKEN_HEADER, CASHIER_TOKEN, KITCHEN_TOKEN
from scan2eat.core.errors import UnauthorizedError
from scan2eat.core.request_context import set_request_context
from scan2eat.services.access import AccessGate, Role, SharedSecretAccessGate
from scan2eat.services.live_updates import LiveUpdateBroadcaster, broadcaster

logger = logging.getLogger(__name__)


def get_access_gate() -> AccessGate:
    return SharedSecretAccessGate(cashier_secret=CASHIER_TOKEN, kitchen_secret=KITCHEN_TOKEN)


def get_broadcaster() -> LiveUpdateBroadcaster:
    return broadcaster


def _log_access_denied(*, role: Role, allowed: Iterable[Role], request: Request) -> None:
    endpoint = f"{request.method} {request.url.path}"
    logger.warning(
        "Access denied: role=%s allowed=%s endpoint=%s",
        role.value,
        ",".join(sorted(r.value for r in allowed)),
        endpoint,
    )


def require_role(roles: Iterable[Role]):
    """Dependency factory: resolves the caller's role and rejects it unless allowed."""
    allowed = frozenset(roles)

    def _dependency(
        request: Request,
        gate: AccessGate = Depends(get_access_gate),
    ) -> Role:
        credential = request.headers.get(ACCESS_TOKEN_HEADER)
        role = gate.resolve_role(credential)
        request.state.role = role
        set_request_context(role=role.value)
        if role not in allowed:
            _log_access_denied(role=role, allowed=allowed, request=request)
            raise UnauthorizedError()
        return role

    return _dependency
