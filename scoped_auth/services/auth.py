import bcrypt
from sqlalchemy import select
from sqlalchemy.orm import Session

from scoped_auth.models.user import User


def hash_password(password: str) -> str:
    # bcrypt.gensalt()每次產生不同的鹽值，用來防止彩虹表攻擊
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())


def authenticate_user(
    db: Session,
    password: str,
    email: str | None = None,
    username: str | None = None,
) -> User | None:
    """Return the user matching email (or username) and password, else None."""
    if email:
        stmt = select(User).where(User.email == email.lower())
    elif username:
        stmt = select(User).where(User.username == username)
    else:
        return None

    user = db.execute(stmt).scalar_one_or_none()
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user
