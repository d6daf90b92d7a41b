"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="GEOPLAN_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    log_level: str = Field(default="INFO", description="Root log level used by configure_logging().")
    data_root: Path = Field(default=Path("data"), description="Root directory for persisted files.")

    # Distance cache
    cache_backend: Literal["memory", "file", "supabase"] = Field(
        default="file",
        description="Durable store backing the distance cache.",
    )
    cache_file: Optional[Path] = Field(
        default=None,
        description="JSON blob used by the file cache backend. Defaults to google_maps_cache.json under data_root.",
    )
    cache_table: str = Field(default="geo_cache", description="Supabase table used by the supabase cache backend.")
    cache_storage_key: str = Field(
        default="google_maps_cache",
        description="Namespace under which cache rows are stored.",
    )
    cache_ttl_seconds: float = Field(default=3600.0, gt=0.0)
    cache_max_entries: int = Field(default=1000, ge=1)

    # External providers
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="API key for the Google Distance Matrix service.",
    )
    distance_matrix_url: str = "https://maps.googleapis.com/maps/api/distancematrix/json"
    nominatim_url: str = "https://nominatim.openstreetmap.org/search"
    nominatim_user_agent: str = "geoplan/0.1 (sales route planning)"
    provider_timeout_seconds: float = Field(default=10.0, gt=0.0)
    rate_limit_interval_ms: int = Field(default=1000, ge=0)
    matrix_block_size: int = Field(default=25, ge=1, le=25)

    # Regional hints
    country_code: str = "mu"
    country_name: str = "Mauritius"
    country_aliases: tuple[str, ...] = Field(
        default=("mauritius", "maurice"),
        description="Lowercase names that mark an address as already qualified with the country.",
    )
    provider_language: str = "fr"
    default_region: str = "other"

    # Estimates
    fallback_distance_km: float = Field(default=25.0, ge=0.0)
    fallback_duration_min: int = Field(default=35, ge=0)
    average_speed_kmh: float = Field(default=40.0, gt=0.0)

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("data_root", "cache_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Optional[Path]:
        if value is None:
            return None
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("country_aliases", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated)."""
        if isinstance(value, tuple):
            return tuple(str(item).lower() for item in value)
        if isinstance(value, list):
            return tuple(str(item).lower() for item in value)
        if isinstance(value, str):
            return tuple(item.strip().lower() for item in value.split(",") if item.strip())
        return tuple()

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def cache_path(self) -> Path:
        return self.cache_file or self.data_root / "google_maps_cache.json"


settings = Settings()
