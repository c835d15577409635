"""
Autocrypt Peer Service Configuration

Settings come from the environment or a ``.env`` file. Secrets are
generated per process when unset, so a restart invalidates issued
tokens.
"""

import secrets
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Service settings."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    app_name: str = "Autocrypt Peer Service"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    
    # HTTP surface
    host: str = "127.0.0.1"
    port: int = 8000
    max_message_bytes: int = Field(default=1024 * 1024, gt=0)
    
    # Access tokens
    secret_key: str = Field(default_factory=lambda: secrets.token_hex(32))
    api_token: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    token_issuer: str = "autocrypt-peer-service"
    token_algorithm: Literal["HS256", "HS384", "HS512"] = "HS256"
    token_expire_minutes: int = Field(default=60, gt=0)
    
    # Peer database
    data_dir: Path = Field(default_factory=lambda: Path("./data"))
    db_filename: str = "peers.db"
    
    @field_validator("secret_key")
    @classmethod
    def secret_key_long_enough(cls, v: str) -> str:
        if len(v) < MIN_SECRET_LENGTH:
            raise ValueError(f"secret_key must be at least {MIN_SECRET_LENGTH} characters")
        return v
    
    @field_validator("host")
    @classmethod
    def validate_localhost_only(cls, v: str) -> str:
        """Peer state is private to the local mail client."""
        if v not in ("127.0.0.1", "localhost", "::1"):
            raise ValueError("Service must bind to localhost only")
        return v
    
    @field_validator("data_dir", mode="after")
    @classmethod
    def ensure_data_dir_exists(cls, v: Path) -> Path:
        v.mkdir(parents=True, exist_ok=True)
        return v
    
    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_filename


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
