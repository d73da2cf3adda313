from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "milkbook"
    version: str = "0.1.0"
    DEBUG: bool = False
    APP_DATABASE_DSN: str = "sqlite:////tmp/milkbook.db"
    LOG_LEVEL: str = "INFO"

    # Bearer tokens
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_MINUTES: int = 60 * 24 * 7

    # Password hashing cost factor
    BCRYPT_ROUNDS: int = 12

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"


settings = Settings()
