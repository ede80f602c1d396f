"""
Assignment policy passed explicitly into every engine function.

The engine never reads global settings; the API edge builds a PolicyConfig
from Settings and hands it down. Tests construct PolicyConfig directly.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import FrozenSet, Tuple

from assetguard.config.settings import Settings, get_settings
from assetguard.models.entities import AssetCategory


@dataclass(frozen=True)
class CategoryLimits:
    max_same_category: int
    department_allowlist: FrozenSet[str] = frozenset()  # empty = unrestricted
    role_allowlist: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class PolicyConfig:
    max_assignments_per_employee: int = 5
    hardware_limits: CategoryLimits = field(default_factory=lambda: CategoryLimits(max_same_category=3))
    software_limits: CategoryLimits = field(default_factory=lambda: CategoryLimits(max_same_category=5))
    software_fallback_capacity: int = 5
    utilization_advisory_percent: float = 80.0
    utilization_warning_percent: float = 90.0
    utilization_error_percent: float = 100.0
    incompatible_tags: Tuple[Tuple[str, str], ...] = (("macos", "windows"),)
    max_future_years: int = 1
    automation_confidence_threshold: float = 0.7
    weekly_volume_threshold: int = 50
    bulk_return_threshold: int = 20
    cascade_threshold: int = 4

    def limits_for(self, category: AssetCategory) -> CategoryLimits:
        if category == AssetCategory.HARDWARE:
            return self.hardware_limits
        return self.software_limits

    @classmethod
    def from_settings(cls, settings: Settings) -> "PolicyConfig":
        return cls(
            max_assignments_per_employee=settings.max_assignments_per_employee,
            hardware_limits=CategoryLimits(
                max_same_category=settings.max_same_category_hardware,
                department_allowlist=frozenset(settings.hardware_department_allowlist),
                role_allowlist=frozenset(settings.hardware_role_allowlist),
            ),
            software_limits=CategoryLimits(
                max_same_category=settings.max_same_category_software,
                department_allowlist=frozenset(settings.software_department_allowlist),
                role_allowlist=frozenset(settings.software_role_allowlist),
            ),
            software_fallback_capacity=settings.software_fallback_capacity,
            utilization_advisory_percent=settings.utilization_advisory_percent,
            utilization_warning_percent=settings.utilization_warning_percent,
            utilization_error_percent=settings.utilization_error_percent,
            incompatible_tags=tuple((a, b) for a, b in settings.incompatible_tags),
            max_future_years=settings.max_future_years,
            automation_confidence_threshold=settings.automation_confidence_threshold,
            weekly_volume_threshold=settings.weekly_volume_threshold,
            bulk_return_threshold=settings.bulk_return_threshold,
            cascade_threshold=settings.cascade_threshold,
        )


DEFAULT_POLICY = PolicyConfig()


@lru_cache(maxsize=1)
def get_policy() -> PolicyConfig:
    return PolicyConfig.from_settings(get_settings())
