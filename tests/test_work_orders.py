from __future__ import annotations

from datetime import date

import pytest

from production_tracking.core.errors import EngineValidationError
from production_tracking.schemas.commands import IssueWorkOrderCommand
from production_tracking.services.work_orders import WorkOrderService, compute_demand

from .conftest import NOW, TODAY


@pytest.fixture
def service(make_service) -> WorkOrderService:
    return make_service(WorkOrderService)


def test_issue_work_order(service, snapshot):
    command = IssueWorkOrderCommand(
        demand_ids=["wo-dem-cut-cp-1"], vendor="  Cut Masters ", target_date=date(2024, 6, 1), notes="Rush"
    )
    result = service.issue_work_order(snapshot, command)
    wo = result.work_order
    assert wo.id == f"WO-{int(NOW.timestamp() * 1000)}"
    assert wo.wo_number.startswith("WO-CUT-")
    assert wo.vendor_name == "Cut Masters"
    assert wo.stage == "Cutting"
    assert wo.status == "Issued"
    assert wo.date_issued == TODAY
    assert wo.target_date == date(2024, 6, 1)
    assert wo.notes == "Rush"
    assert wo.total_qty == 1200
    assert result.update.changed_collections() == ["issued_work_orders"]
    assert result.update.issued_work_orders == [wo]


def test_issued_items_never_reappear_as_demand(service, snapshot):
    result = service.issue_work_order(
        snapshot, IssueWorkOrderCommand(demand_ids=["wo-dem-cut-cp-1", "wor-1"], vendor="Acme Services")
    )
    assert result.work_order.total_qty == 2400
    # stage and prefix come from the first selected item
    assert result.work_order.wo_number.startswith("WO-CUT-")
    after = result.update.apply_to(snapshot)
    assert compute_demand(after.jobs, after.issued_work_orders, today=TODAY) == []


def test_new_work_orders_go_first_and_old_ones_are_untouched(service, snapshot):
    first = service.issue_work_order(snapshot, IssueWorkOrderCommand(demand_ids=["wor-1"], vendor="Wash Co"))
    snap = first.update.apply_to(snapshot)
    second = service.issue_work_order(snap, IssueWorkOrderCommand(demand_ids=["wo-dem-cut-cp-1"], vendor="Cutters"))
    orders = second.update.issued_work_orders
    assert [o.vendor_name for o in orders] == ["Cutters", "Wash Co"]
    assert orders[1] == first.work_order
    assert orders[1].wo_number.startswith("WO-WAS-")


@pytest.mark.parametrize(
    "command",
    [
        IssueWorkOrderCommand(demand_ids=[], vendor="Cutters"),
        IssueWorkOrderCommand(demand_ids=["wor-1"], vendor="   "),
        IssueWorkOrderCommand(demand_ids=["wor-unknown"], vendor="Cutters"),
    ],
)
def test_invalid_issue_commands(service, snapshot, command):
    with pytest.raises(EngineValidationError):
        service.issue_work_order(snapshot, command)


def test_already_issued_demand_is_rejected(service, snapshot):
    snap = service.issue_work_order(
        snapshot, IssueWorkOrderCommand(demand_ids=["wor-1"], vendor="Wash Co")
    ).update.apply_to(snapshot)
    with pytest.raises(EngineValidationError) as excinfo:
        service.issue_work_order(snap, IssueWorkOrderCommand(demand_ids=["wor-1"], vendor="Wash Co"))
    assert excinfo.value.details == {"demand_ids": ["wor-1"]}


def test_repeated_ids_in_a_selection_are_issued_once(service, snapshot):
    result = service.issue_work_order(
        snapshot, IssueWorkOrderCommand(demand_ids=["wor-1", "wor-1"], vendor="Wash Co")
    )
    assert [i.id for i in result.work_order.items] == ["wor-1"]


def test_cutting_demand_requires_approved_cutting_plan(snapshot):
    job = snapshot.jobs[0]
    plans = job.plans.model_copy(update={"cutting": "In Progress"})
    jobs = [job.model_copy(update={"plans": plans})]
    assert [d.id for d in compute_demand(jobs, [], today=TODAY)] == ["wor-1"]


def test_cutting_demand_is_stamped_with_the_given_day(snapshot):
    demand = {d.id: d for d in compute_demand(snapshot.jobs, [], today=date(2024, 1, 2))}
    assert demand["wo-dem-cut-cp-1"].date_requested == date(2024, 1, 2)


def test_demand_needs_an_explicit_day(snapshot):
    with pytest.raises(TypeError):
        compute_demand(snapshot.jobs, [])


def test_issued_cutting_demand_uses_the_service_clock(service, snapshot):
    result = service.issue_work_order(
        snapshot, IssueWorkOrderCommand(demand_ids=["wo-dem-cut-cp-1"], vendor="Cut Co")
    )
    assert result.work_order.items[0].date_requested == TODAY
