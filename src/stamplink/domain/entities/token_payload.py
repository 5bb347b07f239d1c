"""Token payload model.

Holds the four values sealed inside a validation token. A payload is built
fresh for every generate call and rebuilt from decrypted bytes on validate.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TokenPayload(BaseModel):
    """Structure of the data contained within a validation token."""

    model_config = ConfigDict(frozen=True, strict=True)

    created_at: datetime = Field(..., description="UTC time the token was issued")
    resource_id: str = Field(..., description="Identifier of the entity being validated")
    purpose: str = Field(..., description="Use case the token was issued for")
    security_stamp: str = Field(..., description="Server-held secret bound into the token")

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime) -> datetime:
        """Require an aware timestamp and store it in UTC."""
        if v.tzinfo is None or v.utcoffset() is None:
            raise ValueError("created_at must be timezone-aware")
        return v.astimezone(timezone.utc)
