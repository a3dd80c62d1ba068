from __future__ import annotations

import logging
from datetime import date

import pytest

from production_tracking.core.errors import EntityNotFoundError
from production_tracking.schemas.logistics import Parcel, ParcelOtherItem, ParcelSampleRef
from production_tracking.schemas.production import DevelopmentSample
from production_tracking.schemas.tracking import DevSampleOrigin, JobMaterialOrigin, JobSamplingOrigin
from production_tracking.services.aggregation import build_unified_rows, index_rows, require_row


def _rows(snapshot):
    return build_unified_rows(snapshot.jobs, snapshot.development_samples, snapshot.parcels)


def test_rows_follow_job_style_order_then_development(snapshot):
    ids = [r.id for r in _rows(snapshot)]
    assert ids == ["sam-s1", "sam-s2", "bom-b1", "bom-b2", "sam-s3", "bom-b3", "sam-d1"]


def test_row_origins_locate_their_source(snapshot):
    rows = index_rows(_rows(snapshot))
    assert rows["sam-s1"].origin == JobSamplingOrigin(job_id="JOB-001", style_id="sty-1", item_id="s1")
    assert rows["bom-b1"].origin == JobMaterialOrigin(job_id="JOB-001", style_id="sty-1", item_id="b1")
    assert rows["sam-d1"].origin == DevSampleOrigin(item_id="d1")


def test_row_fields(snapshot):
    rows = index_rows(_rows(snapshot))
    sample = rows["sam-s1"]
    assert sample.ref_id == "SAM-1001"
    assert sample.parent_ref == "JOB-001"
    assert sample.detail == "M | 2 pcs"
    assert sample.category == "Sample"
    assert sample.approval_required is True

    material = rows["bom-b1"]
    assert material.ref_id == "FAB-77"
    assert material.category == "Material"
    assert material.current_stage == "Received"

    dev = rows["sam-d1"]
    assert dev.source == "Development"
    assert dev.parent_ref == "R&D"
    assert dev.approval_required is True


def test_material_stage_follows_lab_then_sourcing(snapshot):
    job = snapshot.jobs[0]
    style = job.styles[0]
    bom = [
        style.bom[0].model_copy(update={"lab_status": "Testing", "sourcing_status": "Submitted"}),
        style.bom[1].model_copy(update={"sourcing_status": "Submitted"}),
    ]
    jobs = [job.model_copy(update={"styles": [style.model_copy(update={"bom": bom})]})]
    rows = index_rows(build_unified_rows(jobs, [], []))
    assert rows["bom-b1"].current_stage == "Testing"
    assert rows["bom-b2"].current_stage == "Submitted"


def test_missing_sampling_stage_defaults_to_not_started(snapshot):
    job = snapshot.jobs[0]
    style = job.styles[0]
    sampling = [style.sampling_details[0].model_copy(update={"current_stage": None})]
    jobs = [job.model_copy(update={"styles": [style.model_copy(update={"sampling_details": sampling})]})]
    rows = index_rows(build_unified_rows(jobs, [], []))
    assert rows["sam-s1"].current_stage == "Not Started"


def test_legacy_parcel_lines_join_by_reference(snapshot):
    rows = index_rows(_rows(snapshot))
    shipped = rows["sam-s3"]
    assert shipped.sent_on == date(2024, 5, 1)
    assert shipped.delivered_on == date(2024, 5, 4)
    assert shipped.parcel_no == "EXP-1111"
    assert shipped.courier == "FedEx"
    assert shipped.parcel_status == "Received"


def test_unshipped_rows_have_no_shipment_fields(snapshot):
    row = index_rows(_rows(snapshot))["sam-s1"]
    assert row.sent_on is None
    assert row.delivered_on is None
    assert row.parcel_no is None
    assert row.tracking_no is None


def test_lines_with_source_row_id_match_only_by_id(snapshot):
    parcels = [
        Parcel(
            id="PRC-1",
            parcel_no="EXP-2222",
            buyer="Acme Apparel",
            sent_date=date(2024, 5, 6),
            # same reference as SAM-1001 but created for another row
            samples=[ParcelSampleRef(id="x", sam_number="SAM-1001", source_row_id="sam-other")],
        ),
        Parcel(
            id="PRC-2",
            parcel_no="EXP-3333",
            buyer="Acme Apparel",
            sent_date=date(2024, 5, 7),
            samples=[ParcelSampleRef(id="s1", sam_number="renamed", source_row_id="sam-s1")],
        ),
    ]
    rows = index_rows(build_unified_rows(snapshot.jobs, [], parcels))
    assert rows["sam-s1"].parcel_no == "EXP-3333"


def test_other_item_name_matches_material_reference(snapshot):
    parcels = [
        Parcel(
            id="PRC-1",
            parcel_no="EXP-4444",
            buyer="Acme Apparel",
            sent_date=date(2024, 5, 6),
            other_items=[ParcelOtherItem(id="oi-1", name="FAB-77")],
        )
    ]
    rows = index_rows(build_unified_rows(snapshot.jobs, [], parcels))
    assert rows["bom-b1"].parcel_no == "EXP-4444"
    assert rows["bom-b2"].parcel_no is None


def test_first_matching_parcel_wins(snapshot):
    parcels = [
        Parcel(id="P1", parcel_no="EXP-1", buyer="B", sent_date=date(2024, 5, 1),
               samples=[ParcelSampleRef(id="s3", sam_number="SAM-2001")]),
        Parcel(id="P2", parcel_no="EXP-2", buyer="B", sent_date=date(2024, 5, 2),
               samples=[ParcelSampleRef(id="s3", sam_number="SAM-2001")]),
    ]
    rows = index_rows(build_unified_rows(snapshot.jobs, [], parcels))
    assert rows["sam-s3"].parcel_no == "EXP-1"


def test_aggregation_is_idempotent(snapshot):
    first = _rows(snapshot)
    second = _rows(snapshot)
    assert [r.model_dump() for r in first] == [r.model_dump() for r in second]


def test_aggregation_does_not_mutate_inputs(snapshot):
    before = snapshot.model_dump()
    _rows(snapshot)
    assert snapshot.model_dump() == before


def test_duplicate_row_ids_warn_and_first_wins(snapshot, caplog):
    twin = DevelopmentSample(id="d1", sam_number="DEV-999", buyer="Other", style_no="RD-9")
    dev = [*snapshot.development_samples, twin]
    with caplog.at_level(logging.WARNING, logger="production_tracking.services.aggregation"):
        rows = build_unified_rows(snapshot.jobs, dev, snapshot.parcels)
    assert "Duplicate tracker row ids" in caplog.text
    assert len(rows) == 8
    assert index_rows(rows)["sam-d1"].ref_id == "DEV-007"


def test_require_row_raises_for_unknown_id(snapshot):
    with pytest.raises(EntityNotFoundError):
        require_row(_rows(snapshot), "sam-missing")
