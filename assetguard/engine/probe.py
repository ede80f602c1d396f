"""
Single-shot real-time availability probe.

The answer comes from an injected oracle and timestamps from an injected
clock, so the probe is deterministic under test. An unavailable answer
carries ``next_check_at``; scheduling the retry is the caller's job. The
probe applies no timeout and no cancellation: callers in a request path must
wrap it with their own deadline (e.g. ``asyncio.wait_for``).
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol

from assetguard.config.policy import DEFAULT_POLICY, PolicyConfig
from assetguard.engine.availability import resolve_availability
from assetguard.models.entities import AssetCategory, Snapshot, coerce_enum
from assetguard.models.findings import ProbeResult
from assetguard.utils.dates import utc_now

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = timedelta(seconds=60)


class AvailabilityOracle(Protocol):
    async def check(self, asset_id: str, category: AssetCategory) -> ProbeResult:
        ...


class SnapshotOracle:
    """Oracle that answers from a snapshot through the availability resolver."""

    def __init__(self, snapshot: Snapshot, policy: PolicyConfig = DEFAULT_POLICY):
        self.snapshot = snapshot
        self.policy = policy

    async def check(self, asset_id: str, category: AssetCategory) -> ProbeResult:
        info = resolve_availability(asset_id, category, self.snapshot, self.policy)
        return ProbeResult(available=info.is_available, reason=info.reason)


class RealTimeProbe:
    def __init__(
        self,
        oracle: AvailabilityOracle,
        clock: Optional[Callable[[], datetime]] = None,
        retry_after: timedelta = DEFAULT_RETRY_AFTER,
    ):
        self.oracle = oracle
        self.clock = clock or utc_now
        self.retry_after = retry_after

    async def probe(self, asset_id: str, category: AssetCategory) -> ProbeResult:
        category = coerce_enum(AssetCategory, category, "category")
        try:
            answer = await self.oracle.check(asset_id, category)
        except Exception as exc:
            # Failures are reported as data so callers branch on one shape
            logger.warning(f"Availability oracle failed for {category.value} {asset_id}: {exc}")
            return ProbeResult(
                available=False,
                reason=f"availability check failed: {exc}",
                next_check_at=self.clock() + self.retry_after,
            )

        if answer.available:
            return ProbeResult(available=True)
        return ProbeResult(
            available=False,
            reason=answer.reason or "Asset is in use according to the real-time check.",
            next_check_at=self.clock() + self.retry_after,
        )


async def probe_real_time_availability(
    asset_id: str,
    category: AssetCategory,
    oracle: AvailabilityOracle,
    clock: Optional[Callable[[], datetime]] = None,
    retry_after: timedelta = DEFAULT_RETRY_AFTER,
) -> ProbeResult:
    return await RealTimeProbe(oracle, clock=clock, retry_after=retry_after).probe(asset_id, category)
