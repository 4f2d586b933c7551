"""
Cleanup service for expired access tokens.

Expired tokens are already rejected on use; this removes the rows that were
never presented again. Should be run periodically (e.g. from cron).
"""
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import select

from scoped_auth.database import SessionLocal
from scoped_auth.logging_config import get_logger
from scoped_auth.models.access_token import ETERNAL_TTL, AccessToken
from scoped_auth.services.tokens import is_expired

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = get_logger("cleanup")


def cleanup_expired_tokens(db: "Session | None" = None, now: datetime | None = None) -> int:
    """
    Delete expired access tokens.

    Args:
        db: Optional database session. If not provided, creates a new one.
        now: Reference time, defaults to the current UTC time

    Returns:
        Number of deleted tokens
    """
    close_db = False
    if db is None:
        db = SessionLocal()
        close_db = True

    now = now or datetime.now(timezone.utc)

    try:
        # ttl is per row, so expiry is evaluated in Python
        candidates = db.execute(
            select(AccessToken).where(AccessToken.ttl != ETERNAL_TTL)
        ).scalars().all()
        expired = [token for token in candidates if is_expired(token, now)]

        for token in expired:
            db.delete(token)
        db.commit()

        logger.info("Deleted %d expired access tokens", len(expired))
        return len(expired)

    except Exception:
        db.rollback()
        logger.error("Expired token cleanup failed", exc_info=True)
        raise
    finally:
        if close_db:
            db.close()
