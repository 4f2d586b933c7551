"""
Access token database model.

The token id is the bearer secret sent in the Authorization header. Scopes
are stored as a JSON list of opaque strings; an empty or null list means the
token carries default (unscoped) access.
"""
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from scoped_auth.database import Base
from scoped_auth.utils.datetime import ensure_aware

if TYPE_CHECKING:
    from scoped_auth.models.user import User

ETERNAL_TTL = -1


class AccessToken(Base):
    """
    Bearer credential bound to a user.

    Attributes:
        id: 64-char random identifier, doubles as the bearer secret
        user_id: Owner of the token
        ttl: Time to live in seconds (-1 never expires)
        scopes: Granted scope names, None/[] for default access
        created_at: Issue timestamp, expiry is created_at + ttl
    """

    __tablename__ = "access_tokens"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    ttl: Mapped[int] = mapped_column()
    scopes: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    user: Mapped["User"] = relationship("User", back_populates="access_tokens")

    @property
    def expires_at(self) -> datetime | None:
        """Expiry timestamp (UTC), None for eternal tokens."""
        if self.ttl == ETERNAL_TTL:
            return None
        return ensure_aware(self.created_at) + timedelta(seconds=self.ttl)

    def __repr__(self) -> str:
        return f"<AccessToken(user_id={self.user_id}, ttl={self.ttl}, scopes={self.scopes})>"
