from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from production_tracking.core.deps import get_settings
from production_tracking.core.settings import AppSettings
from production_tracking.schemas.production import WorkOrderRequest
from production_tracking.schemas.requests import (
    ApprovalTrackerRequest,
    CommentsTrackerRequest,
    SearchRequest,
    SnapshotRequest,
    WipBoard,
    WipBoardRequest,
)
from production_tracking.schemas.tracking import ApprovalTrackerRow, PPMeetingRow, UnifiedRow
from production_tracking.services import views
from production_tracking.services.aggregation import build_unified_rows
from production_tracking.services.base import BaseService
from production_tracking.services.wip import stage_counts, wip_rows

router = APIRouter(prefix="/views", tags=["Views"])


def _rows(payload: SnapshotRequest) -> List[UnifiedRow]:
    snap = payload.snapshot
    return build_unified_rows(snap.jobs, snap.development_samples, snap.parcels)


# PUBLIC_INTERFACE
@router.post(
    "/unified-rows",
    response_model=List[UnifiedRow],
    summary="Unified tracker rows",
    description="Samples, BOM lines and development samples joined with their shipment metadata.",
)
def unified_rows(payload: SnapshotRequest) -> List[UnifiedRow]:
    return _rows(payload)


# PUBLIC_INTERFACE
@router.post(
    "/approval-tracker",
    response_model=List[ApprovalTrackerRow],
    summary="Approval tracker",
    description="Items needing buyer approval or lab testing, with both traffic lights.",
)
def approval_tracker(payload: ApprovalTrackerRequest) -> List[ApprovalTrackerRow]:
    snap = payload.snapshot
    return views.approval_tracker(
        snap.jobs,
        snap.development_samples,
        _rows(payload),
        search=payload.search,
        status_filter=payload.status_filter,
    )


# PUBLIC_INTERFACE
@router.post(
    "/comments-tracker",
    response_model=List[UnifiedRow],
    summary="Comments tracker",
    description="Delivered samples and samples carrying buyer feedback.",
)
def comments_tracker(payload: CommentsTrackerRequest) -> List[UnifiedRow]:
    return views.comments_tracker(_rows(payload), search=payload.search, status_filter=payload.status_filter)


# PUBLIC_INTERFACE
@router.post(
    "/work-order-demand",
    response_model=List[WorkOrderRequest],
    summary="Outstanding work-order demand",
    description="Approved cutting lines and work-order requests not yet issued.",
)
def work_order_demand(
    payload: SearchRequest,
    settings: AppSettings = Depends(get_settings),
) -> List[WorkOrderRequest]:
    snap = payload.snapshot
    return views.work_order_demand(
        snap.jobs, snap.issued_work_orders, search=payload.search, today=BaseService(settings).today()
    )


# PUBLIC_INTERFACE
@router.post(
    "/pp-meetings",
    response_model=List[PPMeetingRow],
    summary="PP-meeting schedule",
    description="One row per style with its pre-production meeting state.",
)
def pp_meetings(payload: SearchRequest) -> List[PPMeetingRow]:
    return views.pp_meeting_rows(payload.snapshot.jobs, search=payload.search)


# PUBLIC_INTERFACE
@router.post(
    "/wip",
    response_model=WipBoard,
    summary="Sampling WIP board",
    description="Active samples by WIP stage, most recently updated first, with per-stage counts.",
)
def wip_board(payload: WipBoardRequest) -> WipBoard:
    rows = _rows(payload)
    return WipBoard(
        rows=wip_rows(rows, stage_filter=payload.stage_filter, search=payload.search),
        counts=stage_counts(rows),
    )
