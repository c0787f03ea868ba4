from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    app_name: str = "Document Manager"
    app_env: str = Field("dev", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    secret_key: str = Field(default="change-me-in-production", alias="SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    refresh_token_expire_days: int = Field(7, alias="REFRESH_TOKEN_EXPIRE_DAYS")
    bcrypt_rounds: int = Field(12, alias="BCRYPT_ROUNDS")
    auth_cookie_name: str = Field("dm_jwt", alias="AUTH_COOKIE_NAME")

    database_url: str | None = Field(default=None, alias="DATABASE_URL")

    upload_dir: str = Field("./uploads", alias="UPLOAD_DIR")
    max_upload_mb: int = Field(10, alias="MAX_UPLOAD_MB")

    rate_limit_window_seconds: int = Field(60, alias="RATE_LIMIT_WINDOW_SECONDS")
    rate_limit_max_calls: int = Field(30, alias="RATE_LIMIT_MAX_CALLS")

    cors_allowed_origins: str = Field(
        "http://localhost:3000,http://localhost:4200", alias="CORS_ALLOWED_ORIGINS"
    )

    seed_dev_data: bool = Field(True, alias="SEED_DEV_DATA")
    seed_admin_password: str = Field("T3st1ng", alias="SEED_ADMIN_PASSWORD")
    seed_user_password: str = Field("password123", alias="SEED_USER_PASSWORD")

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
