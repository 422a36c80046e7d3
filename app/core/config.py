"""
Application configuration

Environment variables and defaults managed with pydantic-settings
"""
from functools import lru_cache
from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
import json

# Project root (the directory holding pyproject.toml)
BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "ATS-Pipeline-API"
    app_env: str = "development"
    debug: bool = True

    # Database
    database_url: str = f"sqlite+aiosqlite:///{BASE_DIR / 'data' / 'ats.db'}"

    # CORS
    cors_origins: List[str] = ["*"]

    # Public links handed to clients and candidates
    public_base_url: str = "http://localhost:5173"
    feedback_link_expiry_days: int = 14
    share_link_token_bytes: int = 24

    # Audit chain verification window when no range is given
    audit_verify_default_days: int = 7

    # Open jobs left in one stage longer than this are flagged as stale
    stale_job_days: int = 7

    # CNPJ lookup (ReceitaWS)
    cnpj_api_base_url: str = "https://receitaws.com.br/v1"
    cnpj_timeout: float = 10.0

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("database_url", mode="before")
    @classmethod
    def fix_database_path(cls, v):
        if isinstance(v, str) and "./data/" in v:
            return v.replace("./data/", str(BASE_DIR / "data") + "/")
        return v

    @field_validator("public_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton"""
    return Settings()


settings = get_settings()
