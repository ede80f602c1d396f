from datetime import date, datetime, timedelta
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ValidationInfo, field_validator

from assetguard.config.policy import PolicyConfig, get_policy
from assetguard.config.settings import get_settings
from assetguard.engine.availability import find_overlapping_assignments, resolve_availability
from assetguard.engine.detector import detect_conflicts
from assetguard.engine.edge_cases import assess_all_edge_cases, assess_edge_case
from assetguard.engine.eligibility import validate_eligibility
from assetguard.engine.probe import RealTimeProbe, SnapshotOracle
from assetguard.engine.resolver import attempt_automated_resolution
from assetguard.models.entities import (
    AssetCategory,
    Assignment,
    AssignmentStatus,
    CandidateAssignment,
    Employee,
    EmployeeStatus,
    HardwareAsset,
    HardwareCondition,
    HardwareStatus,
    Snapshot,
    SoftwareAsset,
)
from assetguard.models.findings import (
    AdvisoryWarning,
    Conflict,
    DetectionReport,
    EdgeCaseScenario,
    ResolutionProposal,
    ResolutionStrategy,
)
from assetguard.storage.cache import ReportCache, get_report_cache
from assetguard.utils.dates import today_utc
from assetguard.utils.scoring import rank_conflicts, score_report

router = APIRouter()
logger = logging.getLogger(__name__)


class EmployeeDTO(BaseModel):
    id: str
    name: str
    department: str
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    role: Optional[str] = None

    def to_domain(self) -> Employee:
        return Employee(id=self.id, name=self.name, department=self.department, status=self.status, role=self.role)


class HardwareDTO(BaseModel):
    id: str
    name: str
    manufacturer: str = ""
    model: str = ""
    serial_number: str = ""
    status: HardwareStatus = HardwareStatus.AVAILABLE
    condition: HardwareCondition = HardwareCondition.GOOD
    maintenance_scheduled: bool = False
    last_maintenance_date: Optional[date] = None
    compatibility_tags: List[str] = []

    def to_domain(self) -> HardwareAsset:
        return HardwareAsset(
            id=self.id,
            name=self.name,
            manufacturer=self.manufacturer,
            model=self.model,
            serial_number=self.serial_number,
            status=self.status,
            condition=self.condition,
            maintenance_scheduled=self.maintenance_scheduled,
            last_maintenance_date=self.last_maintenance_date,
            compatibility_tags=frozenset(self.compatibility_tags),
        )


class SoftwareDTO(BaseModel):
    id: str
    name: str
    vendor: str = ""
    license_capacity: Optional[int] = None
    expiry_date: Optional[date] = None
    compatibility_tags: List[str] = []

    def to_domain(self) -> SoftwareAsset:
        return SoftwareAsset(
            id=self.id,
            name=self.name,
            vendor=self.vendor,
            license_capacity=self.license_capacity,
            expiry_date=self.expiry_date,
            compatibility_tags=frozenset(self.compatibility_tags),
        )


class AssignmentDTO(BaseModel):
    id: str
    employee_id: str
    asset_id: str
    category: AssetCategory
    assigned_date: date
    status: AssignmentStatus = AssignmentStatus.ACTIVE
    expected_return_date: Optional[date] = None
    return_date: Optional[date] = None

    @field_validator("expected_return_date", "return_date")
    @classmethod
    def validate_return_after_assignment(cls, v: Optional[date], info: ValidationInfo):
        """Return dates may not precede the assigned date."""
        assigned = info.data.get("assigned_date")
        if v is not None and assigned is not None and v < assigned:
            raise ValueError("return date must be on or after assigned_date")
        return v

    def to_domain(self) -> Assignment:
        return Assignment(**self.model_dump())


class SnapshotDTO(BaseModel):
    employees: List[EmployeeDTO] = []
    hardware: List[HardwareDTO] = []
    software: List[SoftwareDTO] = []
    assignments: List[AssignmentDTO] = []

    def to_domain(self) -> Snapshot:
        return Snapshot(
            employees=tuple(e.to_domain() for e in self.employees),
            hardware=tuple(h.to_domain() for h in self.hardware),
            software=tuple(s.to_domain() for s in self.software),
            assignments=tuple(a.to_domain() for a in self.assignments),
        )


class CandidateDTO(BaseModel):
    employee_id: str
    asset_id: str
    category: AssetCategory
    assigned_date: date
    expected_return_date: Optional[date] = None

    @field_validator("expected_return_date")
    @classmethod
    def validate_period(cls, v: Optional[date], info: ValidationInfo):
        assigned = info.data.get("assigned_date")
        if v is not None and assigned is not None and v < assigned:
            raise ValueError("expected_return_date must be on or after assigned_date")
        return v

    def to_domain(self) -> CandidateAssignment:
        return CandidateAssignment(**self.model_dump())

    @classmethod
    def from_domain(cls, c: CandidateAssignment) -> "CandidateDTO":
        return cls(
            employee_id=c.employee_id,
            asset_id=c.asset_id,
            category=c.category,
            assigned_date=c.assigned_date,
            expected_return_date=c.expected_return_date,
        )


class ConflictDTO(BaseModel):
    id: str
    dimension: str
    cause: str
    severity: str
    title: str
    description: str
    impact: str
    affected_employee_ids: List[str]
    affected_asset_ids: List[str]
    affected_assignment_ids: List[str]
    auto_resolvable: bool
    detected_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, c: Conflict) -> "ConflictDTO":
        return cls(
            id=c.id,
            dimension=c.dimension.value,
            cause=c.cause.value,
            severity=c.severity.value,
            title=c.title,
            description=c.description,
            impact=c.impact,
            affected_employee_ids=list(c.affected_employee_ids),
            affected_asset_ids=list(c.affected_asset_ids),
            affected_assignment_ids=list(c.affected_assignment_ids),
            auto_resolvable=c.auto_resolvable,
            detected_at=c.detected_at,
        )


class WarningDTO(BaseModel):
    id: str
    category: str
    message: str
    actionable: bool
    details: Optional[str] = None
    recommendation: Optional[str] = None

    @classmethod
    def from_domain(cls, w: AdvisoryWarning) -> "WarningDTO":
        return cls(
            id=w.id,
            category=w.category.value,
            message=w.message,
            actionable=w.actionable,
            details=w.details,
            recommendation=w.recommendation,
        )


class ProposalDTO(BaseModel):
    conflict_id: str
    strategy: str
    title: str
    description: str
    steps: List[str]
    automated: bool
    confidence: float
    estimated_resolution_time: str
    alternatives: List["ProposalDTO"] = []

    @classmethod
    def from_domain(cls, p: ResolutionProposal) -> "ProposalDTO":
        return cls(
            conflict_id=p.conflict_id,
            strategy=p.strategy.value,
            title=p.title,
            description=p.description,
            steps=list(p.steps),
            automated=p.automated,
            confidence=p.confidence,
            estimated_resolution_time=p.estimated_resolution_time,
            alternatives=[cls.from_domain(a) for a in p.alternatives],
        )


ProposalDTO.model_rebuild()


class DetectionResponse(BaseModel):
    has_conflicts: bool
    conflicts: List[ConflictDTO]
    warnings: List[WarningDTO]
    proposals: List[ProposalDTO]
    risk_score: float
    highest_severity: Optional[str] = None
    cached: bool = False

    @classmethod
    def from_domain(cls, report: DetectionReport) -> "DetectionResponse":
        ranked = rank_conflicts(report.conflicts)
        return cls(
            has_conflicts=report.has_conflicts,
            conflicts=[ConflictDTO.from_domain(c) for c in report.conflicts],
            warnings=[WarningDTO.from_domain(w) for w in report.warnings],
            proposals=[ProposalDTO.from_domain(p) for p in report.proposals],
            risk_score=score_report(report.conflicts),
            highest_severity=ranked[0].severity.value if ranked else None,
        )


class AvailabilityRequest(BaseModel):
    asset_id: str
    category: AssetCategory
    snapshot: SnapshotDTO


class EligibilityRequest(BaseModel):
    employee_id: str
    asset_id: str
    category: AssetCategory
    snapshot: SnapshotDTO


class DetectRequest(BaseModel):
    candidate: CandidateDTO
    snapshot: SnapshotDTO
    as_of: Optional[date] = None


class OverlapRequest(BaseModel):
    asset_id: str
    proposed_date: date
    assignments: List[AssignmentDTO]


class ResolveRequest(BaseModel):
    candidate: CandidateDTO
    snapshot: SnapshotDTO
    conflict_id: str
    strategy: ResolutionStrategy
    as_of: Optional[date] = None


class ResolveResponse(BaseModel):
    success: bool
    message: str
    revised_candidate: Optional[CandidateDTO] = None
    fallback_options: List[ProposalDTO] = []


class EdgeCaseRequest(BaseModel):
    snapshot: SnapshotDTO
    as_of: Optional[date] = None


@router.post("/availability/resolve", summary="Resolve asset availability")
def resolve_asset_availability(req: AvailabilityRequest, policy: PolicyConfig = Depends(get_policy)):
    """
    Current availability of one asset, independent of who is asking.

    Unknown assets come back with `status="not_found"` and `is_available=false`.
    """
    return resolve_availability(req.asset_id, req.category, req.snapshot.to_domain(), policy)


@router.post("/availability/probe", summary="Single-shot real-time availability probe")
async def probe_availability(req: AvailabilityRequest, policy: PolicyConfig = Depends(get_policy)):
    retry_after = timedelta(seconds=get_settings().probe_retry_after_seconds)
    probe = RealTimeProbe(SnapshotOracle(req.snapshot.to_domain(), policy), retry_after=retry_after)
    return await probe.probe(req.asset_id, req.category)


@router.post("/eligibility/validate", summary="Validate employee eligibility for an asset")
def validate_employee_eligibility(req: EligibilityRequest, policy: PolicyConfig = Depends(get_policy)):
    """
    Accept/warn/reject verdict for one employee and one asset.

    **Returns:**
    - `issues`: blocking findings; `can_proceed` is false when any exist
    - `warnings`: non-blocking findings; `requires_approval` is true when any cannot be overridden
    - `recommendations`: free-text hints
    """
    snapshot = req.snapshot.to_domain()
    employee = snapshot.employee(req.employee_id)
    if employee is None:
        raise HTTPException(status_code=404, detail=f"Employee {req.employee_id} not found in snapshot")
    return validate_eligibility(employee, req.asset_id, req.category, snapshot, policy)


@router.post("/conflicts/detect", response_model=DetectionResponse, summary="Detect assignment conflicts")
def detect(
    req: DetectRequest,
    policy: PolicyConfig = Depends(get_policy),
    cache: Optional[ReportCache] = Depends(get_report_cache),
):
    """
    Evaluate a candidate assignment against the snapshot.

    **Algorithm**:
    1. Check the report cache for an identical request and as-of date
    2. Run the five detection passes (resource, scheduling, policy, business rule, data integrity)
    3. Generate advisory warnings
    4. Plan resolution proposals for every conflict

    The snapshot may be stale by the time the caller commits; re-run detection
    immediately before writing the assignment.
    """
    as_of = req.as_of or today_utc()
    logger.info(
        f"Detect request: {req.candidate.employee_id}/{req.candidate.asset_id} "
        f"against {len(req.snapshot.assignments)} assignments"
    )

    request_hash = ReportCache.hash_request(req.model_dump(mode="json"), as_of.isoformat())
    if cache is not None:
        cached = cache.get(request_hash)
        if cached:
            logger.info("Cache hit")
            return {**cached, "cached": True}

    report = detect_conflicts(req.candidate.to_domain(), req.snapshot.to_domain(), policy=policy, today=as_of)
    response = DetectionResponse.from_domain(report)

    if cache is not None:
        cache.set(request_hash, response.model_dump(mode="json"))
    return response


@router.post("/conflicts/overlaps", summary="Find assignments overlapping a date")
def overlaps(req: OverlapRequest):
    assignments = [a.to_domain() for a in req.assignments]
    return find_overlapping_assignments(req.asset_id, req.proposed_date, assignments)


@router.post("/conflicts/resolve", response_model=ResolveResponse, summary="Attempt automated resolution")
def resolve(req: ResolveRequest, policy: PolicyConfig = Depends(get_policy)):
    """
    Re-detect conflicts, pick the proposal matching `conflict_id` and `strategy`,
    and attempt it. Nothing is persisted; re-validate `revised_candidate` before committing.
    """
    logger.info(f"Resolve request: {req.conflict_id} via {req.strategy.value}")
    candidate = req.candidate.to_domain()
    snapshot = req.snapshot.to_domain()
    report = detect_conflicts(candidate, snapshot, policy=policy, today=req.as_of or today_utc())

    conflict = next((c for c in report.conflicts if c.id == req.conflict_id), None)
    if conflict is None:
        raise HTTPException(status_code=404, detail=f"Conflict {req.conflict_id} not detected for this candidate")
    proposal = next(
        (p for p in report.proposals if p.conflict_id == conflict.id and p.strategy == req.strategy),
        None,
    )
    if proposal is None:
        raise HTTPException(
            status_code=404,
            detail=f"No {req.strategy.value} proposal for conflict {req.conflict_id}",
        )

    outcome = attempt_automated_resolution(conflict, proposal, candidate, snapshot, policy)
    return ResolveResponse(
        success=outcome.success,
        message=outcome.message,
        revised_candidate=CandidateDTO.from_domain(outcome.revised_candidate) if outcome.revised_candidate else None,
        fallback_options=[ProposalDTO.from_domain(p) for p in outcome.fallback_options],
    )


@router.post("/edge-cases", summary="Assess every edge-case playbook")
def edge_cases(req: EdgeCaseRequest, policy: PolicyConfig = Depends(get_policy)):
    return assess_all_edge_cases(req.snapshot.to_domain(), policy, req.as_of or today_utc())


@router.post("/edge-cases/{scenario}", summary="Assess one edge-case playbook")
def edge_case(scenario: EdgeCaseScenario, req: EdgeCaseRequest, policy: PolicyConfig = Depends(get_policy)):
    return assess_edge_case(scenario, req.snapshot.to_domain(), policy, req.as_of or today_utc())
