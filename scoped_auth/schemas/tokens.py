from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from scoped_auth.utils.validators import normalize_scope_names


class AccessTokenCreateRequest(BaseModel):
    """Body of POST /users/{id}/accessTokens."""

    ttl: int | None = None
    scopes: list[str] = Field(default_factory=list)

    @field_validator("scopes")
    @classmethod
    def validate_scopes(cls, v: list[str]) -> list[str]:
        return normalize_scope_names(v)


class AccessTokenResponse(BaseModel):
    id: str
    ttl: int
    scopes: list[str] | None = None
    created_at: datetime
    expires_at: datetime | None = None
    user_id: int

    model_config = ConfigDict(from_attributes=True)
