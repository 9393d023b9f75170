"""Verified caller identity as seen by the booking API."""

from pydantic import BaseModel, ConfigDict, Field

from .enums import Role


class Identity(BaseModel):
    """Subject and role read from an upstream-verified token.

    In-memory only; never persisted.
    """

    model_config = ConfigDict(frozen=True)

    subject: str = Field(..., min_length=1, description="Token 'sub' claim")
    role: Role
