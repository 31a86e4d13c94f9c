from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: str = Field(default="dev")  # dev|test|prod
    LOG_LEVEL: str | None = Field(default=None)

    # Security
    JWT_SECRET: str = Field(default="change-me")
    JWT_ALG: str = Field(default="HS256")
    JWT_EXPIRES_MIN: int = Field(default=60 * 24)

    # Ledger DB (users, connections, jobs, logs, audit)
    DATABASE_URL: str = Field(default="postgresql+psycopg://app:app@db:5432/csvbridge")

    # CORS
    CORS_ORIGINS: str = Field(default="http://localhost:3000,http://localhost")

    # Celery / Redis
    REDIS_URL: str = Field(default="redis://redis:6379/0")

    # Files
    UPLOAD_DIR: str = Field(default="/app/data/uploads")

    # Remote SQL Server targets
    REMOTE_DB_DRIVER: str = Field(default="mssql+pyodbc")
    REMOTE_ODBC_DRIVER: str = Field(default="ODBC Driver 18 for SQL Server")
    REMOTE_ENCRYPT: bool = Field(default=True)
    REMOTE_TRUST_SERVER_CERTIFICATE: bool = Field(default=False)
    REMOTE_CONNECT_TIMEOUT: int = Field(default=30)
    REMOTE_DEFAULT_PORT: int = Field(default=1433)

    # Seed (dev)
    SEED_ADMIN: bool = Field(default=True)
    SEED_ADMIN_LOGIN: str = Field(default="admin")
    SEED_ADMIN_PASSWORD: str = Field(default="admin123")


settings = Settings()
