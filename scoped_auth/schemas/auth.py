from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from scoped_auth.utils.validators import PasswordValidationError, validate_password


class UserCreateRequest(BaseModel):
    email: EmailStr
    password: str
    username: str | None = Field(default=None, min_length=1, max_length=100)

    @field_validator('password')
    @classmethod
    def check_password(cls, v: str) -> str:
        try:
            validate_password(v)
        except PasswordValidationError as e:
            # Pydantic的欄位驗證器只會攔截ValueError等標準例外類型
            raise ValueError('; '.join(e.errors))
        return v


class UserResponse(BaseModel):
    id: int
    email: str
    username: str | None = None
    created_at: datetime

    # 允許直接從 SQLAlchemy ORM 物件建立：UserResponse.model_validate(user)
    model_config = ConfigDict(from_attributes=True)


class LoginRequest(BaseModel):
    email: EmailStr | None = None
    username: str | None = None
    password: str
    ttl: int | None = None

    @model_validator(mode="after")
    def require_identity(self) -> "LoginRequest":
        if not self.email and not self.username:
            raise ValueError("email or username is required")
        return self
