from functools import lru_cache
from typing import List, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ASSETGUARD_", env_file=".env", extra="ignore")

    app_name: str = "AssetGuard"
    debug: bool = True
    redis_url: str = Field("redis://localhost:6379/0", validation_alias="REDIS_URL")
    cache_enabled: bool = True
    cache_ttl_seconds: int = 600

    # assignment policy
    max_assignments_per_employee: int = 5
    max_same_category_hardware: int = 3
    max_same_category_software: int = 5
    hardware_department_allowlist: List[str] = []
    software_department_allowlist: List[str] = []
    hardware_role_allowlist: List[str] = []
    software_role_allowlist: List[str] = []
    software_fallback_capacity: int = 5
    utilization_advisory_percent: float = 80.0
    utilization_warning_percent: float = 90.0
    utilization_error_percent: float = 100.0
    incompatible_tags: List[Tuple[str, str]] = [("macos", "windows")]

    # detection and resolution
    max_future_years: int = 1
    automation_confidence_threshold: float = 0.7
    weekly_volume_threshold: int = 50
    bulk_return_threshold: int = 20
    cascade_threshold: int = 4
    probe_retry_after_seconds: int = 60


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
