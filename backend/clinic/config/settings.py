import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AnyUrl, Field
from typing import Optional, List

env = os.getenv("APP_ENV", "development")
env_file = f".env.{env}"

class Settings(BaseSettings):
    database_url: AnyUrl
    database_echo: bool = False
    # CORS origins can be overridden via CORS_ORIGINS env var (JSON list or comma-separated)
    cors_origins: List[str] = Field(default=["http://localhost:3000"])
    log_level: str = "INFO"

    # SMTP delivery; leave smtp_host empty to log emails instead of sending them
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True
    mail_from: str = "no-reply@clinic.local"

    # verification / password-reset codes
    verification_code_ttl_minutes: int = 15

    # pagination
    default_page_size: int = 10
    max_page_size: int = 100

    model_config = SettingsConfigDict(
        env_file=env_file,
        env_file_encoding="utf-8",
        extra="ignore",
    )

settings = Settings()
