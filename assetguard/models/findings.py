from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Tuple

from assetguard.models.entities import AssetCategory, Assignment, CandidateAssignment


class ConflictDimension(str, Enum):
    RESOURCE = "resource"
    SCHEDULING = "scheduling"
    POLICY = "policy"
    BUSINESS_RULE = "business_rule"
    DATA_INTEGRITY = "data_integrity"


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Higher is more severe."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.CRITICAL: 4, Severity.HIGH: 3, Severity.MEDIUM: 2, Severity.LOW: 1}


class ConflictCause(str, Enum):
    HARDWARE_DOUBLE_BOOKED = "hardware_double_booked"
    LICENSE_EXHAUSTED = "license_exhausted"
    DUPLICATE_ASSIGNMENT = "duplicate_assignment"
    PERIOD_OVERLAP = "period_overlap"
    EMPLOYEE_UNKNOWN = "employee_unknown"
    ASSIGNMENT_CAP_REACHED = "assignment_cap_reached"
    EMPLOYEE_INACTIVE = "employee_inactive"
    ASSET_IN_MAINTENANCE = "asset_in_maintenance"
    ASSET_DISPOSED = "asset_disposed"
    LICENSE_EXPIRED = "license_expired"
    EMPLOYEE_MISSING = "employee_missing"
    ASSET_MISSING = "asset_missing"
    ASSIGNED_DATE_TOO_FAR = "assigned_date_too_far"

    @property
    def dimension(self) -> ConflictDimension:
        return CAUSE_DIMENSIONS[self]


CAUSE_DIMENSIONS = {
    ConflictCause.HARDWARE_DOUBLE_BOOKED: ConflictDimension.RESOURCE,
    ConflictCause.LICENSE_EXHAUSTED: ConflictDimension.RESOURCE,
    ConflictCause.DUPLICATE_ASSIGNMENT: ConflictDimension.SCHEDULING,
    ConflictCause.PERIOD_OVERLAP: ConflictDimension.SCHEDULING,
    ConflictCause.EMPLOYEE_UNKNOWN: ConflictDimension.POLICY,
    ConflictCause.ASSIGNMENT_CAP_REACHED: ConflictDimension.POLICY,
    ConflictCause.EMPLOYEE_INACTIVE: ConflictDimension.POLICY,
    ConflictCause.ASSET_IN_MAINTENANCE: ConflictDimension.BUSINESS_RULE,
    ConflictCause.ASSET_DISPOSED: ConflictDimension.BUSINESS_RULE,
    ConflictCause.LICENSE_EXPIRED: ConflictDimension.BUSINESS_RULE,
    ConflictCause.EMPLOYEE_MISSING: ConflictDimension.DATA_INTEGRITY,
    ConflictCause.ASSET_MISSING: ConflictDimension.DATA_INTEGRITY,
    ConflictCause.ASSIGNED_DATE_TOO_FAR: ConflictDimension.DATA_INTEGRITY,
}


class WarningCategory(str, Enum):
    PERFORMANCE = "performance"
    COMPLIANCE = "compliance"


class ResolutionStrategy(str, Enum):
    RESCHEDULE = "reschedule"
    REASSIGN = "reassign"
    ALTERNATIVE_ASSET = "alternative_asset"
    POLICY_OVERRIDE = "policy_override"
    MANUAL_REVIEW = "manual_review"


class RestrictionSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class RestrictionType(str, Enum):
    LICENSE_LIMIT = "license_limit"
    MAINTENANCE = "maintenance"


class IssueType(str, Enum):
    AVAILABILITY = "availability"
    POLICY = "policy"
    LIMIT = "limit"
    COMPATIBILITY = "compatibility"


@dataclass(frozen=True)
class Restriction:
    type: RestrictionType
    message: str
    severity: RestrictionSeverity
    can_override: bool = False
    override_permission: Optional[str] = None


@dataclass(frozen=True)
class AvailabilityInfo:
    asset_id: str
    name: str
    category: AssetCategory
    is_available: bool
    status: str
    current_assignment: Optional[Assignment] = None
    reason: Optional[str] = None
    restrictions: Tuple[Restriction, ...] = ()
    next_available: Optional[date] = None
    utilization: Optional[float] = None  # percent, software only
    capacity: Optional[int] = None
    current_users: Optional[int] = None

    @property
    def not_found(self) -> bool:
        return self.status == "not_found"


@dataclass(frozen=True)
class ValidationIssue:
    type: IssueType
    severity: RestrictionSeverity
    message: str
    solution: Optional[str] = None
    can_override: bool = False


@dataclass(frozen=True)
class ValidationResult:
    employee_id: str
    availability: AvailabilityInfo
    issues: List[ValidationIssue]
    warnings: List[ValidationIssue]
    recommendations: List[str]
    can_proceed: bool
    requires_approval: bool
    approval_reason: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.can_proceed


@dataclass(frozen=True)
class Conflict:
    id: str
    cause: ConflictCause
    severity: Severity
    title: str
    description: str
    impact: str
    affected_employee_ids: Tuple[str, ...]
    affected_asset_ids: Tuple[str, ...]
    affected_assignment_ids: Tuple[str, ...] = ()
    auto_resolvable: bool = False
    detected_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def dimension(self) -> ConflictDimension:
        return self.cause.dimension


@dataclass(frozen=True)
class AdvisoryWarning:
    id: str
    category: WarningCategory
    message: str
    actionable: bool = True
    details: Optional[str] = None
    recommendation: Optional[str] = None


@dataclass(frozen=True)
class ResolutionProposal:
    conflict_id: str
    strategy: ResolutionStrategy
    title: str
    description: str
    steps: Tuple[str, ...]
    automated: bool
    confidence: float
    estimated_resolution_time: str
    alternatives: Tuple["ResolutionProposal", ...] = ()

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")


@dataclass(frozen=True)
class DetectionReport:
    conflicts: List[Conflict]
    warnings: List[AdvisoryWarning]
    proposals: List[ResolutionProposal]

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    def by_dimension(self, dimension: ConflictDimension) -> List[Conflict]:
        return [c for c in self.conflicts if c.dimension == dimension]


@dataclass(frozen=True)
class ResolutionOutcome:
    success: bool
    message: str
    revised_candidate: Optional[CandidateAssignment] = None
    fallback_options: Tuple[ResolutionProposal, ...] = ()


@dataclass(frozen=True)
class ProbeResult:
    available: bool
    reason: Optional[str] = None
    next_check_at: Optional[datetime] = None


class EdgeCaseScenario(str, Enum):
    EXPIRED_ASSET = "expired_asset"
    INACTIVE_EMPLOYEE = "inactive_employee"
    MAINTENANCE_CONFLICT = "maintenance_conflict"
    LICENSE_EXPIRY = "license_expiry"
    BULK_RETURN = "bulk_return"
    CASCADE_EFFECT = "cascade_effect"


@dataclass(frozen=True)
class EdgeCaseReport:
    scenario: EdgeCaseScenario
    detected: bool
    description: str
    resolution_steps: Tuple[str, ...]
    preventive_steps: Tuple[str, ...]
    affected_assignment_ids: Tuple[str, ...] = ()
