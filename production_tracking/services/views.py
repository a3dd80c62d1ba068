from __future__ import annotations

from datetime import date
from typing import Iterable, List, Literal, Optional

from production_tracking.core.errors import EngineValidationError
from production_tracking.repositories.production import styles_of
from production_tracking.schemas.production import (
    DevelopmentSample,
    IssuedWorkOrder,
    JobBatch,
    WorkOrderRequest,
)
from production_tracking.schemas.tracking import (
    ApprovalTrackerRow,
    PPMeetingRow,
    StatusFlags,
    UnifiedRow,
)
from .aggregation import index_rows, material_row_id, sample_row_id
from .status import FILTER_COLORS, derive_light_status
from .work_orders import compute_demand

ApprovalFilter = Literal["All", "Pending", "Send", "Received", "Approved"]
CommentFilter = Literal["All", "Pending", "Feedback received"]


def matches_search(search: Optional[str], *fields: Optional[str]) -> bool:
    """Case-insensitive substring match over the given fields; blank search matches all."""
    if not search:
        return True
    term = search.lower()
    return any(term in (f or "").lower() for f in fields)


def _tracker_row(**values) -> ApprovalTrackerRow:
    flags = StatusFlags(
        approval_required=values["approval_required"],
        lab_required=values["lab_required"],
        status=values.get("status"),
        lab_status=values.get("lab_status"),
        sent_on=values.get("sent_on"),
        delivered_on=values.get("delivered_on"),
    )
    return ApprovalTrackerRow(
        approval_light=derive_light_status("approval", flags),
        lab_light=derive_light_status("lab", flags),
        **values,
    )


# PUBLIC_INTERFACE
def approval_tracker(
    jobs: Iterable[JobBatch],
    development_samples: Iterable[DevelopmentSample],
    rows: Iterable[UnifiedRow],
    search: Optional[str] = None,
    status_filter: ApprovalFilter = "All",
) -> List[ApprovalTrackerRow]:
    """
    Items that need buyer approval or lab testing.

    Fabric BOM lines appear once the style's fabric plan is Approved, sampling
    items once its sampling plan is Approved; development samples always
    appear and always require approval.
    """
    if status_filter != "All" and status_filter not in FILTER_COLORS:
        raise EngineValidationError(f"Unknown approval filter {status_filter!r}")
    unified = index_rows(rows)
    result: List[ApprovalTrackerRow] = []

    for job, style in styles_of(jobs):
        plans = job.plans_for(style)
        if plans.fabric == "Approved":
            for item in style.bom:
                if item.process_group != "Fabric":
                    continue
                if not (item.approval_required or item.is_testing_required):
                    continue
                row = unified.get(material_row_id(item.id))
                result.append(
                    _tracker_row(
                        id=material_row_id(item.id),
                        job_id=job.id,
                        factory_ref=style.factory_ref or "-",
                        item_ref=item.supplier_ref or "-",
                        item_type="Fabric",
                        item_detail=item.component_name,
                        approval_required=item.approval_required,
                        lab_required=item.is_testing_required,
                        deadline=style.delivery_date,
                        status=item.sourcing_status or "Pending",
                        lab_status=item.lab_status or "Pending",
                        buyer=style.buyer,
                        original_id=item.id,
                        parent_job_id=job.id,
                        parent_style_id=style.id,
                        sent_on=row.sent_on if row else None,
                        delivered_on=row.delivered_on if row else None,
                    )
                )
        if plans.sampling == "Approved":
            for s in style.sampling_details:
                if not (s.approval_required or s.is_testing_required):
                    continue
                row = unified.get(sample_row_id(s.id))
                result.append(
                    _tracker_row(
                        id=sample_row_id(s.id),
                        job_id=job.id,
                        factory_ref=style.factory_ref or "-",
                        item_ref=s.sam_number,
                        item_type="Sampling",
                        item_detail=s.type,
                        approval_required=s.approval_required,
                        lab_required=s.is_testing_required,
                        deadline=s.deadline,
                        status=s.status,
                        lab_status=s.lab_status or "Pending",
                        current_stage=s.current_stage or "Not Started",
                        buyer=style.buyer,
                        original_id=s.id,
                        parent_job_id=job.id,
                        parent_style_id=style.id,
                        sent_on=row.sent_on if row else None,
                        delivered_on=row.delivered_on if row else None,
                    )
                )

    for s in development_samples:
        row = unified.get(sample_row_id(s.id))
        result.append(
            _tracker_row(
                id=sample_row_id(s.id),
                job_id="R&D",
                factory_ref=s.style_no,
                item_ref=s.sam_number,
                item_type="R&D Sampling",
                item_detail=s.type,
                approval_required=True,
                lab_required=s.is_testing_required,
                deadline=s.deadline,
                status=s.status,
                lab_status=s.lab_status or "Pending",
                current_stage=s.current_stage or "Not Started",
                buyer=s.buyer,
                original_id=s.id,
                parent_job_id="R&D",
                parent_style_id=s.id,
                sent_on=row.sent_on if row else None,
                delivered_on=row.delivered_on if row else None,
            )
        )

    if status_filter != "All":
        wanted = FILTER_COLORS[status_filter]
        # the filter follows the approval light when approval is required, else the lab light
        result = [
            r for r in result
            if (r.approval_light if r.approval_required else r.lab_light).color == wanted
        ]
    return [r for r in result if matches_search(search, r.job_id, r.item_ref, r.buyer)]


# PUBLIC_INTERFACE
def comments_tracker(
    rows: Iterable[UnifiedRow],
    search: Optional[str] = None,
    status_filter: CommentFilter = "All",
) -> List[UnifiedRow]:
    """Samples whose parcel was received, or that already carry feedback."""
    if status_filter not in ("All", "Pending", "Feedback received"):
        raise EngineValidationError(f"Unknown comments filter {status_filter!r}")
    result = [r for r in rows if r.category == "Sample" and (r.delivered_on or r.feedback_text)]
    if status_filter == "Pending":
        result = [r for r in result if not r.feedback_text]
    elif status_filter == "Feedback received":
        result = [r for r in result if r.feedback_text]
    return [r for r in result if matches_search(search, r.parent_ref, r.ref_id, r.buyer)]


# PUBLIC_INTERFACE
def work_order_demand(
    jobs: Iterable[JobBatch],
    issued_work_orders: Iterable[IssuedWorkOrder],
    search: Optional[str] = None,
    *,
    today: date,
) -> List[WorkOrderRequest]:
    """Outstanding service demand narrowed by job id or service name."""
    demand = compute_demand(jobs, issued_work_orders, today=today)
    return [d for d in demand if matches_search(search, d.job_id, d.service_name)]


# PUBLIC_INTERFACE
def pp_meeting_rows(jobs: Iterable[JobBatch], search: Optional[str] = None) -> List[PPMeetingRow]:
    """One row per style for the PP-meeting schedule."""
    result: List[PPMeetingRow] = []
    for job, style in styles_of(jobs):
        result.append(
            PPMeetingRow(
                id=style.id,
                job_id=job.id,
                buyer=style.buyer,
                po_number=style.po_number or "-",
                factory_ref=style.factory_ref or "-",
                order_date=style.po_date,
                ship_date=style.delivery_date,
                planned_date=style.planned_date or style.delivery_date,
                quantity=style.quantity,
                pp_meeting_date=style.pp_meeting_date.isoformat() if style.pp_meeting_date else "-",
                status=style.pp_meeting_status or "Pending",
                has_notes=style.pp_meeting_notes is not None,
            )
        )
    return [r for r in result if matches_search(search, r.job_id, r.buyer)]
