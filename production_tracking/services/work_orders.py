from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List

from production_tracking.core.errors import EngineValidationError
from production_tracking.core.logging import operation_context
from production_tracking.repositories.production import IssuedWorkOrderRepository
from production_tracking.schemas.commands import IssueWorkOrderCommand, IssueWorkOrderResult
from production_tracking.schemas.production import IssuedWorkOrder, JobBatch, WorkOrderRequest
from production_tracking.schemas.tracking import CollectionUpdate, TrackingSnapshot
from .base import BaseService

logger = logging.getLogger(__name__)


def cutting_demand_id(line_id: str) -> str:
    return f"wo-dem-cut-{line_id}"


def _pct(value: float) -> str:
    return f"{value:g}"


# PUBLIC_INTERFACE
def compute_demand(
    jobs: Iterable[JobBatch],
    issued_work_orders: Iterable[IssuedWorkOrder],
    *,
    today: date,
) -> List[WorkOrderRequest]:
    """
    Outstanding service demand, recomputed from the jobs on every call.

    Approved cutting-plan lines and raw work-order requests are demand until
    an issued work order contains an item with the same id. today stamps
    date_requested on cutting demand and comes from the caller's service clock.
    """
    issued_ids = IssuedWorkOrderRepository(issued_work_orders).issued_item_ids()
    demand: List[WorkOrderRequest] = []
    for job in jobs:
        if job.plans.cutting == "Approved":
            for line in job.cutting_plan_details:
                demand_id = cutting_demand_id(line.id)
                if demand_id in issued_ids:
                    continue
                demand.append(
                    WorkOrderRequest(
                        id=demand_id,
                        job_id=job.id,
                        service_name=f"Bulk Cutting: {line.material_name}",
                        stage="Cutting",
                        qty=job.total_qty,
                        unit="pcs",
                        status="Pending",
                        date_requested=today,
                        target_date=job.ex_factory_date,
                        specs=(
                            f"Shrink: L{_pct(line.shrinkage_length_pct)}% W{_pct(line.shrinkage_width_pct)}%"
                            f" | Extra: {_pct(line.extra_cutting_pct)}%"
                        ),
                    )
                )
        for req in job.work_order_requests:
            if req.id not in issued_ids:
                demand.append(req)
    return demand


class WorkOrderService(BaseService):
    """
    Issues work orders from outstanding demand.

    Issued work orders are append-only; the dedupe in compute_demand is what
    keeps an item from being issued twice.
    """

    def _wo_number(self, stage: str, taken: set) -> str:
        prefix = stage[:3].upper()
        while True:
            number = f"WO-{prefix}-{self.rng.randint(1000, 9999)}"
            if number not in taken:
                return number

    # PUBLIC_INTERFACE
    @operation_context("issue_work_order")
    def issue_work_order(self, snapshot: TrackingSnapshot, command: IssueWorkOrderCommand) -> IssueWorkOrderResult:
        """
        Bundle the selected demand items into one issued work order.

        Raises:
            EngineValidationError: empty selection, blank vendor, or an id that
            is not outstanding demand. Nothing is changed in that case.
        """
        if not command.demand_ids:
            raise EngineValidationError("Select at least one demand item")
        if not command.vendor.strip():
            raise EngineValidationError("Vendor is required")

        today = self.today()
        outstanding = {d.id: d for d in compute_demand(snapshot.jobs, snapshot.issued_work_orders, today=today)}
        unknown = [i for i in command.demand_ids if i not in outstanding]
        if unknown:
            logger.warning("Rejected work order issue; not outstanding: %s", unknown)
            raise EngineValidationError("Demand items are not outstanding", {"demand_ids": unknown})

        # keep the caller's selection order, dropping repeats
        items = [outstanding[i] for i in dict.fromkeys(command.demand_ids)]
        repo = IssuedWorkOrderRepository(snapshot.issued_work_orders)
        stage = items[0].stage
        work_order = IssuedWorkOrder(
            id=f"WO-{int(self.now().timestamp() * 1000)}",
            wo_number=self._wo_number(stage, repo.wo_numbers()),
            vendor_name=command.vendor.strip(),
            stage=stage,
            date_issued=today,
            target_date=command.target_date or today,
            status="Issued",
            items=items,
            notes=command.notes or None,
            total_qty=sum(i.qty for i in items),
        )
        logger.info(
            "Issued work order %s to %s covering %d item(s)", work_order.wo_number, work_order.vendor_name, len(items)
        )
        return IssueWorkOrderResult(
            work_order=work_order,
            update=CollectionUpdate(issued_work_orders=repo.prepend(work_order)),
        )
