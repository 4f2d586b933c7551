# bcrypt only uses the first 72 bytes of the password
MAX_PASSWORD_BYTES = 72


class PasswordValidationError(Exception):
    """Password validation error exception"""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__('; '.join(errors))


def validate_password(password: str) -> None:
    """
    Validate password requirements.

    Rules:
    - Must not be empty
    - At most 72 bytes once UTF-8 encoded

    Raises:
        PasswordValidationError: When password does not meet requirements
    """
    errors = []

    if not password:
        errors.append("Password must not be empty")

    if len(password.encode()) > MAX_PASSWORD_BYTES:
        errors.append(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")

    if errors:
        raise PasswordValidationError(errors)


def normalize_scope_names(scopes: list[str] | None) -> list[str]:
    """
    Strip and de-duplicate scope names, preserving their order.

    Raises:
        ValueError: When a scope name is blank
    """
    if not scopes:
        return []

    normalized: list[str] = []
    for scope in scopes:
        name = scope.strip()
        if not name:
            raise ValueError("Scope names must not be blank")
        if name not in normalized:
            normalized.append(name)
    return normalized
