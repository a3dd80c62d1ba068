from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from production_tracking.core.errors import EngineValidationError
from production_tracking.core.logging import operation_context
from production_tracking.repositories.production import DevelopmentSampleRepository, JobRepository
from production_tracking.schemas.commands import RecordFeedbackCommand
from production_tracking.schemas.tracking import (
    CollectionUpdate,
    DevSampleOrigin,
    JobSamplingOrigin,
    ReminderBatch,
    ReminderItem,
    TrackingSnapshot,
)
from .aggregation import build_unified_rows, require_row
from .base import BaseService
from .views import comments_tracker

logger = logging.getLogger(__name__)


class FeedbackService(BaseService):
    """Buyer feedback capture and feedback reminders."""

    # PUBLIC_INTERFACE
    @operation_context("record_feedback")
    def record_feedback(self, snapshot: TrackingSnapshot, command: RecordFeedbackCommand) -> CollectionUpdate:
        """
        Store buyer feedback and the outcome on the sample behind a tracker row.

        Job samples are patched inside their owning style; development samples
        directly. Only the collection that owns the sample is returned.
        """
        rows = build_unified_rows(snapshot.jobs, snapshot.development_samples, snapshot.parcels)
        row = require_row(rows, command.row_id)
        changes = {
            "comments_received_date": command.received_date or self.today(),
            "comments_sent_by": command.sent_by,
            "feedback_text": command.feedback_text,
            "status": command.outcome,
            "last_updated": self.now(),
        }

        origin = row.origin
        if isinstance(origin, JobSamplingOrigin):
            jobs = JobRepository(snapshot.jobs).patch_items(
                {(origin.job_id, origin.style_id, origin.item_id): changes}, {}
            )
            update = CollectionUpdate(jobs=jobs)
        elif isinstance(origin, DevSampleOrigin):
            dev_samples = DevelopmentSampleRepository(snapshot.development_samples).patch(origin.item_id, **changes)
            update = CollectionUpdate(development_samples=dev_samples)
        else:
            raise EngineValidationError("Feedback can only be recorded for samples", {"row_id": command.row_id})

        logger.info("Recorded %s feedback for %s", command.outcome, row.ref_id)
        return update

    # PUBLIC_INTERFACE
    @operation_context("build_reminder")
    def build_reminder(
        self, snapshot: TrackingSnapshot, row_ids: Iterable[str], today: Optional[date] = None
    ) -> ReminderBatch:
        """
        Collect delivered samples of one buyer for a feedback reminder.

        Raises:
            EngineValidationError: empty selection, or samples of more than one buyer.
        """
        wanted = set(row_ids)
        rows = comments_tracker(build_unified_rows(snapshot.jobs, snapshot.development_samples, snapshot.parcels))
        selected = [r for r in rows if r.id in wanted]
        if not selected:
            raise EngineValidationError("Select at least one delivered sample")
        buyers = {r.buyer for r in selected}
        if len(buyers) > 1:
            raise EngineValidationError(
                "Only items sent to the same buyer can be combined in one reminder",
                {"buyers": sorted(buyers)},
            )

        today = today or self.today()
        items = [
            ReminderItem(
                row_id=r.id,
                ref_id=r.ref_id,
                type=r.type,
                delivered_on=r.delivered_on,
                courier=r.courier,
                tracking_no=r.tracking_no,
                days_since_receipt=max((today - r.delivered_on).days, 0) if r.delivered_on else 0,
            )
            for r in selected
        ]
        return ReminderBatch(buyer=selected[0].buyer, generated_on=today, items=items)
