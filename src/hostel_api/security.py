"""Capability checks for the booking API.

Trust Model:
- API Gateway validates the JWT before the request reaches us
- We decode the payload to read the subject and role claims
- The role is mapped to a fixed capability set; routes declare the
  capability they need, never the roles
"""

import logging
from collections.abc import Callable
from typing import assert_never

from fastapi import Request

from hostel_ledger.models.enums import Capability, Role
from hostel_ledger.models.errors import AuthenticationError, PermissionDeniedError
from hostel_ledger.models.identity import Identity
from hostel_ledger.utils.jwt import extract_identity

logger = logging.getLogger(__name__)


def capabilities_for(role: Role) -> frozenset[Capability]:
    """Capability set granted to a role."""
    match role:
        case Role.STUDENT:
            return frozenset({Capability.RESERVE, Capability.RELEASE})
        case Role.VENDOR:
            return frozenset({Capability.MANAGE_INVENTORY})
        case Role.ADMIN:
            return frozenset(Capability)
        case _:
            assert_never(role)


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization")
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_identity(request: Request) -> Identity:
    """Resolve the caller identity from the Authorization header.

    Raises:
        AuthenticationError: If no usable bearer token is present
    """
    identity = extract_identity(_bearer_token(request))
    if identity is None:
        logger.warning("auth_identity_missing", extra={"path": request.url.path})
        raise AuthenticationError()
    return identity


def require_capability(capability: Capability) -> Callable[[Request], Identity]:
    """Build a dependency that admits only callers holding ``capability``.

    Usage:
        @router.post("/rooms/{room_id}/reservations")
        def reserve(identity: Identity = Depends(require_capability(Capability.RESERVE))):
            ...
    """

    def dependency(request: Request) -> Identity:
        identity = get_identity(request)
        if capability not in capabilities_for(identity.role):
            logger.warning(
                "auth_capability_denied",
                extra={
                    "path": request.url.path,
                    "role": identity.role.value,
                    "capability": capability.value,
                },
            )
            raise PermissionDeniedError(
                f"Role '{identity.role.value}' cannot {capability.value.replace('_', ' ')}",
                {"capability": capability.value},
            )
        return identity

    return dependency
