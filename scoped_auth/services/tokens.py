import secrets
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from scoped_auth.config import Settings, settings as default_settings
from scoped_auth.models.access_token import ETERNAL_TTL, AccessToken
from scoped_auth.models.user import User
from scoped_auth.utils.validators import normalize_scope_names

TOKEN_ID_LENGTH = 64


class TokenTTLError(ValueError):
    """Raised when a requested token ttl is not acceptable."""

    def __init__(self, ttl: int, reason: str):
        self.ttl = ttl
        super().__init__(f"Invalid ttl {ttl}: {reason}")


def generate_token_id() -> str:
    """
    Generate a random access token id.

    Returns:
        64 URL-safe characters; the id is the bearer secret
    """
    # 48 random bytes -> 64 base64url chars
    return secrets.token_urlsafe(48)[:TOKEN_ID_LENGTH]


def resolve_ttl(ttl: int | None, config: Settings = default_settings) -> int:
    """
    Resolve the ttl stored on a new token.

    - None falls back to ACCESS_TOKEN_DEFAULT_TTL
    - -1 means "never expires" and requires ALLOW_ETERNAL_TOKENS
    - values above ACCESS_TOKEN_MAX_TTL are clamped to it

    Raises:
        TokenTTLError: For non-positive ttl values (other than an allowed -1)
    """
    if ttl is None:
        return min(config.ACCESS_TOKEN_DEFAULT_TTL, config.ACCESS_TOKEN_MAX_TTL)

    if ttl == ETERNAL_TTL:
        if not config.ALLOW_ETERNAL_TOKENS:
            raise TokenTTLError(ttl, "eternal tokens are not allowed")
        return ETERNAL_TTL

    if ttl <= 0:
        raise TokenTTLError(ttl, "ttl must be a positive number of seconds")

    return min(ttl, config.ACCESS_TOKEN_MAX_TTL)


def create_access_token(
    db: Session,
    user: User,
    ttl: int | None = None,
    scopes: list[str] | None = None,
    config: Settings = default_settings,
) -> AccessToken:
    """
    Issue a new access token for user.

    Args:
        db: Database session
        user: Token owner
        ttl: Requested ttl in seconds, see resolve_ttl()
        scopes: Granted scopes, empty or None for default access
        config: Settings providing ttl limits

    Returns:
        The persisted AccessToken
    """
    token = AccessToken(
        id=generate_token_id(),
        user_id=user.id,
        ttl=resolve_ttl(ttl, config),
        scopes=normalize_scope_names(scopes),
        created_at=datetime.now(timezone.utc),
    )
    db.add(token)
    db.commit()
    db.refresh(token)
    return token


def get_access_token(db: Session, token_id: str) -> AccessToken | None:
    """Lookup a token by id. Malformed ids return None without querying."""
    if not token_id or len(token_id) > TOKEN_ID_LENGTH:
        return None

    return db.execute(
        select(AccessToken).where(AccessToken.id == token_id)
    ).scalar_one_or_none()


def list_access_tokens(db: Session, user_id: int) -> list[AccessToken]:
    stmt = select(AccessToken).where(
        AccessToken.user_id == user_id
    ).order_by(AccessToken.created_at.desc())
    return list(db.execute(stmt).scalars().all())


def is_expired(token: AccessToken, now: datetime | None = None) -> bool:
    expires_at = token.expires_at
    if expires_at is None:
        return False
    return expires_at <= (now or datetime.now(timezone.utc))


def delete_access_token(db: Session, token: AccessToken) -> None:
    db.delete(token)
    db.commit()
