from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple, Type, Union

from assetguard.exceptions import ContractViolation


class AssetCategory(str, Enum):
    HARDWARE = "hardware"
    SOFTWARE = "software"


class HardwareStatus(str, Enum):
    AVAILABLE = "available"
    ASSIGNED = "assigned"
    MAINTENANCE = "maintenance"
    DISPOSED = "disposed"


class HardwareCondition(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class AssignmentStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    RETURNED = "returned"
    OVERDUE = "overdue"
    LOST = "lost"
    DAMAGED = "damaged"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def coerce_enum(enum_cls: Type[Enum], value, field_name: str):
    """Return ``value`` as a member of ``enum_cls`` or raise ContractViolation."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ContractViolation(f"{field_name}={value!r} is not one of: {allowed}") from None


def _set(obj, name: str, value) -> None:
    object.__setattr__(obj, name, value)


@dataclass(frozen=True)
class Employee:
    id: str
    name: str
    department: str
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    role: Optional[str] = None

    def __post_init__(self):
        _set(self, "status", coerce_enum(EmployeeStatus, self.status, "employee.status"))

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE


@dataclass(frozen=True)
class HardwareAsset:
    id: str
    name: str
    manufacturer: str = ""
    model: str = ""
    serial_number: str = ""
    status: HardwareStatus = HardwareStatus.AVAILABLE
    condition: HardwareCondition = HardwareCondition.GOOD
    maintenance_scheduled: bool = False
    last_maintenance_date: Optional[date] = None
    compatibility_tags: FrozenSet[str] = frozenset()

    def __post_init__(self):
        _set(self, "status", coerce_enum(HardwareStatus, self.status, "hardware.status"))
        _set(self, "condition", coerce_enum(HardwareCondition, self.condition, "hardware.condition"))
        _set(self, "compatibility_tags", frozenset(self.compatibility_tags))

    @property
    def category(self) -> AssetCategory:
        return AssetCategory.HARDWARE


@dataclass(frozen=True)
class SoftwareAsset:
    id: str
    name: str
    vendor: str = ""
    license_capacity: Optional[int] = None
    expiry_date: Optional[date] = None
    compatibility_tags: FrozenSet[str] = frozenset()

    def __post_init__(self):
        if self.license_capacity is not None and self.license_capacity < 0:
            raise ContractViolation(f"software {self.id}: license_capacity must be >= 0")
        _set(self, "compatibility_tags", frozenset(self.compatibility_tags))

    @property
    def category(self) -> AssetCategory:
        return AssetCategory.SOFTWARE


Asset = Union[HardwareAsset, SoftwareAsset]


@dataclass(frozen=True)
class Assignment:
    id: str
    employee_id: str
    asset_id: str
    category: AssetCategory
    assigned_date: date
    status: AssignmentStatus = AssignmentStatus.ACTIVE
    expected_return_date: Optional[date] = None
    return_date: Optional[date] = None

    def __post_init__(self):
        _set(self, "category", coerce_enum(AssetCategory, self.category, "assignment.category"))
        _set(self, "status", coerce_enum(AssignmentStatus, self.status, "assignment.status"))
        for end in (self.expected_return_date, self.return_date):
            if end is not None and end < self.assigned_date:
                raise ContractViolation(
                    f"assignment {self.id}: return date {end} precedes assigned date {self.assigned_date}"
                )

    @property
    def is_active(self) -> bool:
        return self.status == AssignmentStatus.ACTIVE


@dataclass(frozen=True)
class CandidateAssignment:
    """A proposed, unpersisted employee/asset pairing."""

    employee_id: str
    asset_id: str
    category: AssetCategory
    assigned_date: date
    expected_return_date: Optional[date] = None

    def __post_init__(self):
        _set(self, "category", coerce_enum(AssetCategory, self.category, "candidate.category"))
        if self.expected_return_date is not None and self.expected_return_date < self.assigned_date:
            raise ContractViolation("candidate: expected return date precedes assigned date")


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of employees, assets and assignments at one point in time."""

    employees: Tuple[Employee, ...] = ()
    hardware: Tuple[HardwareAsset, ...] = ()
    software: Tuple[SoftwareAsset, ...] = ()
    assignments: Tuple[Assignment, ...] = ()
    _employee_index: Dict[str, Employee] = field(default=None, init=False, repr=False, compare=False)
    _hardware_index: Dict[str, HardwareAsset] = field(default=None, init=False, repr=False, compare=False)
    _software_index: Dict[str, SoftwareAsset] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        _set(self, "employees", tuple(self.employees))
        _set(self, "hardware", tuple(self.hardware))
        _set(self, "software", tuple(self.software))
        _set(self, "assignments", tuple(self.assignments))
        _set(self, "_employee_index", {e.id: e for e in self.employees})
        _set(self, "_hardware_index", {h.id: h for h in self.hardware})
        _set(self, "_software_index", {s.id: s for s in self.software})

    def employee(self, employee_id: str) -> Optional[Employee]:
        return self._employee_index.get(employee_id)

    def asset(self, asset_id: str, category: AssetCategory) -> Optional[Asset]:
        if coerce_enum(AssetCategory, category, "category") == AssetCategory.HARDWARE:
            return self._hardware_index.get(asset_id)
        return self._software_index.get(asset_id)

    def assets(self, category: AssetCategory) -> Tuple[Asset, ...]:
        return self.hardware if category == AssetCategory.HARDWARE else self.software

    def active_assignments_for_asset(self, asset_id: str, category: AssetCategory) -> List[Assignment]:
        """Active assignments of one asset; hardware and software ids live in separate namespaces."""
        category = coerce_enum(AssetCategory, category, "category")
        return [
            a for a in self.assignments
            if a.asset_id == asset_id and a.category == category and a.is_active
        ]

    def active_assignments_for_employee(self, employee_id: str) -> List[Assignment]:
        return [a for a in self.assignments if a.employee_id == employee_id and a.is_active]
