from scoped_auth.models.access_token import AccessToken
from scoped_auth.models.user import User

__all__ = ["AccessToken", "User"]
