from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database settings
    DATABASE_URL: str = "sqlite:///./scoped_auth.db"

    # Access token settings (seconds)
    ACCESS_TOKEN_DEFAULT_TTL: int = 1209600  # 2 weeks
    ACCESS_TOKEN_MAX_TTL: int = 31556926  # 1 year
    # ttl=-1 建立永不過期的 token，預設關閉
    ALLOW_ETERNAL_TOKENS: bool = False

    # Access scopes required by the custom "scoped" remote method
    SCOPED_METHOD_ACCESS_SCOPES: list[str] = ["read:custom"]

    # Logging settings
    LOG_LEVEL: str = "INFO"

    # "env_file": ".env"：從.env檔案讀取環境變數
    # "extra": "ignore"：環境變數裡有、但Settings沒定義的欄位直接忽略
    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
