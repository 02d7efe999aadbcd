"""
Settings for the Contact Book API, read from the environment and backend/.env (pydantic-settings).
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_BACKEND_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _BACKEND_ROOT / ".env"

DEFAULT_ORIGIN = "http://localhost:3000"


class Settings(BaseSettings):
    """
    Without a Supabase URL (or with USE_IN_MEMORY_BACKEND) auth, tables and storage
    are served from process memory.
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""

    ENVIRONMENT: str = "development"
    use_in_memory_backend: bool = Field(
        default=False,
        description="Serve auth, tables and storage from process memory (local dev, tests)",
        validation_alias="USE_IN_MEMORY_BACKEND",
    )
    # Kept as a raw string; see cors_origins_list.
    cors_origins: str = Field(
        default=DEFAULT_ORIGIN,
        description="Comma-separated origins or a JSON array",
        validation_alias="CORS_ORIGINS",
    )

    contacts_table: str = Field(default="contacts", validation_alias="CONTACTS_TABLE")
    profiles_table: str = Field(default="profiles", validation_alias="PROFILES_TABLE")
    photos_bucket: str = Field(default="photos", validation_alias="PHOTOS_BUCKET")
    avatars_bucket: str = Field(default="avatars", validation_alias="AVATARS_BUCKET")

    max_upload_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Largest accepted photo/avatar payload",
        validation_alias="MAX_UPLOAD_BYTES",
    )
    query_cache_ttl_seconds: float = Field(
        default=60.0,
        description="How long a fetched contact list or profile is served from cache",
        validation_alias="QUERY_CACHE_TTL_SECONDS",
    )

    preferences_path: str = Field(
        default=str(_BACKEND_ROOT / ".preferences.json"),
        description="JSON file holding the theme preference",
        validation_alias="PREFERENCES_PATH",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def coerce_cors_origins(cls, value: object) -> str:
        if isinstance(value, (list, tuple)):
            value = ",".join(str(item).strip() for item in value)
        text = "" if value is None else str(value).strip()
        return text or DEFAULT_ORIGIN

    @property
    def in_memory(self) -> bool:
        return self.use_in_memory_backend or not self.SUPABASE_URL

    @property
    def cors_origins_list(self) -> List[str]:
        raw = self.cors_origins.strip()
        items: List[str] = []
        if raw.startswith("["):
            try:
                decoded = json.loads(raw)
            except json.JSONDecodeError:
                decoded = None
            if isinstance(decoded, list):
                items = [item for item in decoded if isinstance(item, str)]
        if not items:
            items = raw.split(",")
        origins = [item.strip() for item in items if item.strip()]
        return origins or [DEFAULT_ORIGIN]

    def validate_for_production(self) -> None:
        """Raise ValueError naming every setting a production deployment is missing."""
        problems: List[str] = [
            name for name in ("SUPABASE_URL", "SUPABASE_ANON_KEY") if not getattr(self, name)
        ]
        if self.use_in_memory_backend:
            problems.append("USE_IN_MEMORY_BACKEND must be unset")
        if problems:
            raise ValueError(f"Missing required environment variables: {', '.join(problems)}")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
