from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from production_tracking.core.errors import EngineValidationError, StageLockedError
from production_tracking.core.logging import operation_context
from production_tracking.repositories.production import DevelopmentSampleRepository, JobRepository
from production_tracking.schemas.commands import StageChangeResult
from production_tracking.schemas.tracking import (
    CollectionUpdate,
    DevSampleOrigin,
    JobSamplingOrigin,
    TrackingSnapshot,
    UnifiedRow,
)
from .aggregation import build_unified_rows, require_row
from .base import BaseService
from .views import matches_search

logger = logging.getLogger(__name__)

WIP_STAGES = (
    "Not Started",
    "Pattern Making",
    "Sample Cut",
    "Stitching",
    "Washing",
    "Finishing",
    "Ready for Dispatch",
)
READY_FOR_DISPATCH = "Ready for Dispatch"
DISPATCHED = "Dispatched"
HISTORICAL_STAGES = ("Received", "Closed-Revised", "Closed-Approved")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(row: UnifiedRow) -> datetime:
    stamp = row.last_updated
    if stamp is None:
        return _EPOCH
    return stamp if stamp.tzinfo else stamp.replace(tzinfo=timezone.utc)


# PUBLIC_INTERFACE
def wip_rows(rows: Iterable[UnifiedRow], stage_filter: str = "All", search: Optional[str] = None) -> List[UnifiedRow]:
    """
    Rows on the sampling WIP board, most recently updated first.

    Only samples are on the board; materials have no WIP stage. Historical
    stages never show. The All filter hides Dispatched items; any other
    filter is an exact stage match.
    """
    result = []
    for row in rows:
        if row.category != "Sample" or row.current_stage in HISTORICAL_STAGES:
            continue
        if stage_filter == "All":
            if row.current_stage == DISPATCHED:
                continue
        elif row.current_stage != stage_filter:
            continue
        if matches_search(search, row.buyer, row.style, row.ref_id):
            result.append(row)
    return sorted(result, key=_sort_key, reverse=True)


# PUBLIC_INTERFACE
def stage_counts(rows: Iterable[UnifiedRow]) -> Dict[str, int]:
    """Per-stage counts for the WIP board. All counts every active item except Dispatched."""
    counts: Dict[str, int] = {"All": 0, DISPATCHED: 0}
    counts.update({stage: 0 for stage in WIP_STAGES})
    for row in rows:
        if row.category != "Sample" or row.current_stage in HISTORICAL_STAGES:
            continue
        if row.current_stage == DISPATCHED:
            counts[DISPATCHED] += 1
            continue
        counts["All"] += 1
        if row.current_stage in counts:
            counts[row.current_stage] += 1
    return counts


class WipStageService(BaseService):
    """
    WIP stage transitions for samples.

    Stages are user-selected jumps in any direction. Ready for Dispatch is
    gated by a quality check; Dispatched is terminal and set elsewhere.
    """

    # PUBLIC_INTERFACE
    @operation_context("select_stage")
    def select_stage(self, snapshot: TrackingSnapshot, row_id: str, stage: str) -> StageChangeResult:
        """
        Apply a stage selection.

        Selecting Ready for Dispatch does not change anything; the result asks
        for a quality check, committed through confirm_quality_check.
        """
        row = self._transitionable_row(snapshot, row_id, stage)
        if stage == READY_FOR_DISPATCH:
            logger.info("Stage %s requested for %s; awaiting quality check", stage, row.ref_id)
            return StageChangeResult(
                row_id=row_id, requested_stage=stage, committed=False, awaiting_quality_check=True
            )
        return self._commit(snapshot, row, stage)

    # PUBLIC_INTERFACE
    @operation_context("confirm_quality_check")
    def confirm_quality_check(self, snapshot: TrackingSnapshot, row_id: str, passed: bool) -> StageChangeResult:
        """Commit Ready for Dispatch once the quality check is confirmed."""
        row = self._transitionable_row(snapshot, row_id, READY_FOR_DISPATCH)
        if not passed:
            logger.warning("Quality check not confirmed for %s; stage stays %s", row.ref_id, row.current_stage)
            raise EngineValidationError(
                "Quality check must be confirmed before Ready for Dispatch",
                {"row_id": row_id, "current_stage": row.current_stage},
            )
        return self._commit(snapshot, row, READY_FOR_DISPATCH)

    def _transitionable_row(self, snapshot: TrackingSnapshot, row_id: str, stage: str) -> UnifiedRow:
        if stage not in WIP_STAGES:
            if stage == DISPATCHED:
                raise EngineValidationError("Dispatched is set by parcel dispatch, not selected", {"stage": stage})
            raise EngineValidationError(f"Unknown WIP stage {stage!r}", {"stage": stage})
        row = require_row(build_unified_rows(snapshot.jobs, snapshot.development_samples, snapshot.parcels), row_id)
        if row.category != "Sample":
            raise EngineValidationError("Materials have no WIP stage", {"row_id": row_id})
        if row.current_stage == DISPATCHED:
            raise StageLockedError(f"{row.ref_id} is dispatched; its stage is read-only", {"row_id": row_id})
        return row

    def _commit(self, snapshot: TrackingSnapshot, row: UnifiedRow, stage: str) -> StageChangeResult:
        changes = {"current_stage": stage, "last_updated": self.now()}
        origin = row.origin
        if isinstance(origin, JobSamplingOrigin):
            update = CollectionUpdate(
                jobs=JobRepository(snapshot.jobs).patch_items(
                    {(origin.job_id, origin.style_id, origin.item_id): changes}, {}
                )
            )
        elif isinstance(origin, DevSampleOrigin):
            update = CollectionUpdate(
                development_samples=DevelopmentSampleRepository(snapshot.development_samples).patch(
                    origin.item_id, **changes
                )
            )
        else:
            raise EngineValidationError("Materials have no WIP stage", {"row_id": row.id})
        logger.info("Moved %s from %s to %s", row.ref_id, row.current_stage, stage)
        return StageChangeResult(row_id=row.id, requested_stage=stage, committed=True, update=update)
