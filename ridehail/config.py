# ridehail/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    # Настройки pydantic: читаем .env, не падаем на лишние ключи
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    # Хранилище: один JSON-документ
    DB_PATH: str = "db.json"

    # JWT (без секрета приложение не стартует)
    JWT_SECRET: str = Field(min_length=1)
    JWT_TTL_SEC: int = 60 * 60 * 24 * 7
    JWT_ALG: str = "HS256"

    # Куки
    COOKIE_NAME: str = "access_token"
    MANAGER_COOKIE_NAME: str = "manager_access_token"
    COOKIE_SECURE: bool = False
    COOKIE_SAMESITE: str = "lax"

    # CORS
    ALLOWED_ORIGINS: str = "*"

    # Логи
    LOG_LEVEL: str = "INFO"

    # Менеджер, которого создаём при старте (если указан)
    SEED_MANAGER_LOGIN: str | None = None
    SEED_MANAGER_PASSWORD: str | None = None
    SEED_MANAGER_NAME: str | None = None


settings = Settings()
