from __future__ import annotations

from fastapi import APIRouter, Depends

from production_tracking.core.deps import get_work_order_service
from production_tracking.schemas.commands import IssueWorkOrderResult
from production_tracking.schemas.requests import IssueWorkOrderRequest
from production_tracking.services.work_orders import WorkOrderService

router = APIRouter(prefix="/work-orders", tags=["Work Orders"])


# PUBLIC_INTERFACE
@router.post(
    "/issue",
    response_model=IssueWorkOrderResult,
    summary="Issue work order",
    description="Bundle outstanding demand items into one work order for a vendor.",
)
def issue_work_order(
    payload: IssueWorkOrderRequest,
    service: WorkOrderService = Depends(get_work_order_service),
) -> IssueWorkOrderResult:
    return service.issue_work_order(payload.snapshot, payload.command)
