from __future__ import annotations

import pytest

from production_tracking.core.errors import EngineValidationError, EntityNotFoundError, StageLockedError
from production_tracking.schemas.commands import Consignee, DispatchParcelCommand
from production_tracking.services.aggregation import build_unified_rows, index_rows
from production_tracking.services.dispatch import ParcelService
from production_tracking.services.wip import WipStageService, stage_counts, wip_rows

from .conftest import NOW


@pytest.fixture
def service(make_service) -> WipStageService:
    return make_service(WipStageService)


def _rows(snapshot):
    return build_unified_rows(snapshot.jobs, snapshot.development_samples, snapshot.parcels)


def test_select_stage_commits_immediately(service, snapshot):
    result = service.select_stage(snapshot, "sam-s1", "Washing")
    assert result.committed is True
    assert result.awaiting_quality_check is False
    row = index_rows(_rows(result.update.apply_to(snapshot)))["sam-s1"]
    assert row.current_stage == "Washing"
    assert row.last_updated == NOW


def test_backward_jump_is_allowed(service, snapshot):
    result = service.select_stage(snapshot, "sam-s1", "Pattern Making")
    assert index_rows(_rows(result.update.apply_to(snapshot)))["sam-s1"].current_stage == "Pattern Making"


def test_development_sample_stage_change(service, snapshot):
    result = service.select_stage(snapshot, "sam-d1", "Sample Cut")
    assert result.update.changed_collections() == ["development_samples"]
    assert result.update.development_samples[0].current_stage == "Sample Cut"


def test_ready_for_dispatch_waits_for_quality_check(service, snapshot):
    result = service.select_stage(snapshot, "sam-s1", "Ready for Dispatch")
    assert result.committed is False
    assert result.awaiting_quality_check is True
    assert result.update.changed_collections() == []
    assert index_rows(_rows(result.update.apply_to(snapshot)))["sam-s1"].current_stage == "Stitching"


def test_failed_quality_check_leaves_stage_unchanged(service, snapshot):
    before = snapshot.model_dump()
    with pytest.raises(EngineValidationError):
        service.confirm_quality_check(snapshot, "sam-s1", passed=False)
    assert snapshot.model_dump() == before
    assert index_rows(_rows(snapshot))["sam-s1"].current_stage == "Stitching"


def test_passed_quality_check_commits_ready_for_dispatch(service, snapshot):
    result = service.confirm_quality_check(snapshot, "sam-s1", passed=True)
    assert result.committed is True
    assert index_rows(_rows(result.update.apply_to(snapshot)))["sam-s1"].current_stage == "Ready for Dispatch"


def test_dispatched_items_are_locked(service, snapshot):
    with pytest.raises(StageLockedError):
        service.select_stage(snapshot, "sam-s2", "Finishing")
    with pytest.raises(StageLockedError):
        service.confirm_quality_check(snapshot, "sam-s2", passed=True)


@pytest.mark.parametrize("stage", ["Dispatched", "Packed", ""])
def test_invalid_target_stages(service, snapshot, stage):
    with pytest.raises(EngineValidationError):
        service.select_stage(snapshot, "sam-s1", stage)


def test_materials_have_no_stage(service, snapshot):
    with pytest.raises(EngineValidationError):
        service.select_stage(snapshot, "bom-b1", "Washing")


def test_unknown_row(service, snapshot):
    with pytest.raises(EntityNotFoundError):
        service.select_stage(snapshot, "sam-ghost", "Washing")


def test_wip_rows_hide_history_and_dispatched(snapshot):
    rows = _rows(snapshot)
    # newest first
    assert [r.id for r in wip_rows(rows)] == ["sam-d1", "sam-s1"]
    ids = {r.id for r in wip_rows(rows)}
    assert "sam-s2" not in ids
    assert "sam-s3" not in ids
    assert [r.id for r in wip_rows(rows, stage_filter="Dispatched")] == ["sam-s2"]
    assert [r.id for r in wip_rows(rows, stage_filter="Stitching")] == ["sam-s1"]
    assert [r.id for r in wip_rows(rows, search="rd-1")] == ["sam-d1"]


def test_stage_counts(snapshot):
    counts = stage_counts(_rows(snapshot))
    assert counts["Dispatched"] == 1
    assert counts["Stitching"] == 1
    assert counts["Pattern Making"] == 1
    assert counts["Ready for Dispatch"] == 0
    # s3 is historical (Received)
    assert counts["All"] == 2


def test_materials_in_flight_stay_off_the_board(make_service, snapshot):
    command = DispatchParcelCommand(
        consignee=Consignee(buyer_id="buy-1", address="2 Dock Rd, Hull"),
        selected_row_ids=["bom-b1"],
    )
    after = make_service(ParcelService).dispatch_parcel(snapshot, command).update.apply_to(snapshot)
    rows = _rows(after)
    assert index_rows(rows)["bom-b1"].current_stage == "Submitted"

    assert [r.id for r in wip_rows(rows)] == ["sam-d1", "sam-s1"]
    assert wip_rows(rows, stage_filter="Submitted") == []
    counts = stage_counts(rows)
    assert counts["All"] == 2
    assert "Submitted" not in counts
