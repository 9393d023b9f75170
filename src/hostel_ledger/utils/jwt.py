"""JWT utility functions for extracting caller identity from tokens.

Architecture Note:
- Tokens arrive as ``Authorization: Bearer <jwt>``
- Signature verification happens upstream (API Gateway JWT authorizer)
- We only decode the payload to read the ``sub`` and ``role`` claims
"""

import base64
import json
import logging
from typing import Any

from hostel_ledger.models.enums import Role
from hostel_ledger.models.identity import Identity

logger = logging.getLogger(__name__)

ROLE_CLAIMS = ("role", "custom:role")


def decode_jwt_payload(token: str) -> dict[str, Any] | None:
    """Decode a JWT token and return the full payload.

    Args:
        token: JWT token string

    Returns:
        Decoded payload dict or None if decoding fails
    """
    if not token:
        return None

    try:
        # JWT format: header.payload.signature
        parts = token.split(".")
        if len(parts) != 3:
            logger.debug("Invalid JWT format: expected 3 parts, got %d", len(parts))
            return None

        payload_b64 = parts[1]

        # Add padding if needed (base64url requires padding to be multiple of 4)
        padding = 4 - len(payload_b64) % 4
        if padding != 4:
            payload_b64 += "=" * padding

        payload_json = base64.urlsafe_b64decode(payload_b64)
        payload = json.loads(payload_json)
        return payload if isinstance(payload, dict) else None

    except (ValueError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Failed to decode JWT payload: %s", type(e).__name__)
        return None


def extract_identity(auth_token: str | None) -> Identity | None:
    """Extract the caller identity (subject and role) from a JWT.

    Args:
        auth_token: Bearer token value without the ``Bearer`` prefix

    Returns:
        Identity if the token carries a subject and a known role, None otherwise.

    Example:
        >>> identity = extract_identity(token)
        >>> if identity and identity.role is Role.ADMIN:
        ...     ...
    """
    if not auth_token:
        return None

    payload = decode_jwt_payload(auth_token)
    if payload is None:
        return None

    subject = payload.get("sub")
    if not subject:
        logger.debug("No 'sub' claim found in token payload")
        return None

    raw_role = next((payload[c] for c in ROLE_CLAIMS if payload.get(c)), None)
    try:
        role = Role(str(raw_role).lower())
    except ValueError:
        logger.warning("Token carries unknown role claim")
        return None

    return Identity(subject=str(subject), role=role)
