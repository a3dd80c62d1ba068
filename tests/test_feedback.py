from __future__ import annotations

from datetime import date

import pytest

from production_tracking.core.errors import EngineValidationError, EntityNotFoundError
from production_tracking.schemas.commands import Consignee, DispatchParcelCommand, RecordFeedbackCommand
from production_tracking.services.aggregation import build_unified_rows, index_rows
from production_tracking.services.dispatch import ParcelService
from production_tracking.services.feedback import FeedbackService
from production_tracking.services.views import approval_tracker

from .conftest import NOW, TODAY


@pytest.fixture
def service(make_service) -> FeedbackService:
    return make_service(FeedbackService)


def _approval_light(snapshot, row_id):
    rows = build_unified_rows(snapshot.jobs, snapshot.development_samples, snapshot.parcels)
    tracker = {r.id: r for r in approval_tracker(snapshot.jobs, snapshot.development_samples, rows)}
    return tracker[row_id].approval_light


def test_record_feedback_on_job_sample(service, snapshot):
    command = RecordFeedbackCommand(
        row_id="sam-s3",
        feedback_text="Fit is fine, shorten sleeves",
        sent_by="Anna",
        received_date=date(2024, 5, 8),
        outcome="Commented",
    )
    update = service.record_feedback(snapshot, command)
    assert update.changed_collections() == ["jobs"]

    sample = update.jobs[1].styles[0].sampling_details[0]
    assert sample.feedback_text == "Fit is fine, shorten sleeves"
    assert sample.comments_sent_by == "Anna"
    assert sample.comments_received_date == date(2024, 5, 8)
    assert sample.status == "Commented"
    assert sample.last_updated == NOW
    # other jobs are passed through untouched
    assert update.jobs[0] is snapshot.jobs[0]


def test_record_feedback_on_development_sample_defaults_date(service, snapshot):
    update = service.record_feedback(snapshot, RecordFeedbackCommand(row_id="sam-d1", outcome="Rejected"))
    assert update.changed_collections() == ["development_samples"]
    sample = update.development_samples[0]
    assert sample.status == "Rejected"
    assert sample.comments_received_date == TODAY


def test_feedback_on_material_is_rejected(service, snapshot):
    with pytest.raises(EngineValidationError):
        service.record_feedback(snapshot, RecordFeedbackCommand(row_id="bom-b1"))


def test_feedback_on_unknown_row(service, snapshot):
    with pytest.raises(EntityNotFoundError):
        service.record_feedback(snapshot, RecordFeedbackCommand(row_id="sam-ghost"))


def test_sample_lifecycle_lights(make_service, snapshot):
    parcels = make_service(ParcelService)
    feedback = make_service(FeedbackService)
    assert _approval_light(snapshot, "sam-s1").color == "red"

    dispatched = parcels.dispatch_parcel(
        snapshot,
        DispatchParcelCommand(
            consignee=Consignee(buyer_id="buy-1", address="2 Dock Rd, Hull"),
            selected_row_ids=["sam-s1"],
        ),
    )
    snapshot = dispatched.update.apply_to(snapshot)
    assert _approval_light(snapshot, "sam-s1").color == "yellow"

    received = parcels.mark_received(snapshot.parcels, [dispatched.parcel.id])
    snapshot = snapshot.model_copy(update={"parcels": received})
    assert _approval_light(snapshot, "sam-s1").color == "orange"

    update = feedback.record_feedback(snapshot, RecordFeedbackCommand(row_id="sam-s1", outcome="Approved"))
    snapshot = update.apply_to(snapshot)
    light = _approval_light(snapshot, "sam-s1")
    assert (light.color, light.label) == ("green", "(APPROVED)")


def test_build_reminder(service, snapshot):
    batch = service.build_reminder(snapshot, ["sam-s3"], today=date(2024, 5, 10))
    assert batch.buyer == "Borealis"
    assert batch.generated_on == date(2024, 5, 10)
    [item] = batch.items
    assert item.ref_id == "SAM-2001"
    assert item.delivered_on == date(2024, 5, 4)
    assert item.days_since_receipt == 6
    assert item.courier == "FedEx"


def test_build_reminder_counts_zero_days_without_receipt(service, snapshot):
    dev = [snapshot.development_samples[0].model_copy(update={"feedback_text": "Chased"})]
    snap = snapshot.model_copy(update={"development_samples": dev})
    batch = service.build_reminder(snap, ["sam-d1"])
    assert batch.items[0].days_since_receipt == 0
    assert batch.generated_on == TODAY


def test_build_reminder_requires_a_selection(service, snapshot):
    with pytest.raises(EngineValidationError):
        service.build_reminder(snapshot, [])
    # rows outside the comments tracker do not count as a selection
    with pytest.raises(EngineValidationError):
        service.build_reminder(snapshot, ["sam-s1"])


def test_build_reminder_rejects_mixed_buyers(service, snapshot):
    dev = [snapshot.development_samples[0].model_copy(update={"feedback_text": "Chased"})]
    snap = snapshot.model_copy(update={"development_samples": dev})
    with pytest.raises(EngineValidationError) as excinfo:
        service.build_reminder(snap, ["sam-s3", "sam-d1"])
    assert excinfo.value.details == {"buyers": ["Acme Apparel", "Borealis"]}
