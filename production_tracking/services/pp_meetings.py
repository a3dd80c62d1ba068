from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from production_tracking.core.errors import EngineValidationError
from production_tracking.core.logging import operation_context
from production_tracking.repositories.production import JobRepository
from production_tracking.schemas.production import JobBatch, PPMeetingNotes, PPMeetingSection, Style
from production_tracking.schemas.tracking import CollectionUpdate
from .base import BaseService

logger = logging.getLogger(__name__)

PPM_OPERATIONS = (
    "Sampling Pattern",
    "Fabric / Lining",
    "Trims & Accessories",
    "Cutting",
    "Stitching",
    "Embellishment",
    "Washing",
    "Packing / Finishing",
    "Testing",
)
COMPLETED = "Completed"


def _check_operation(operation: str) -> None:
    if operation not in PPM_OPERATIONS:
        raise EngineValidationError(f"Unknown PP-meeting operation {operation!r}", {"operation": operation})


class PPMeetingService(BaseService):
    """Pre-production meeting notes of a style."""

    # PUBLIC_INTERFACE
    def notes_for(self, style: Style, today: Optional[date] = None) -> PPMeetingNotes:
        """
        Notes as shown for editing.

        Stored notes are returned with every missing operation filled with an
        empty section. Without stored notes the inspection date falls back to
        the planned date, then the delivery date, then today.
        """
        stored = style.pp_meeting_notes
        if stored is None:
            stored = PPMeetingNotes(inspection_date=style.planned_date or style.delivery_date or today or self.today())
        sections = {op: stored.sections.get(op) or PPMeetingSection() for op in PPM_OPERATIONS}
        # keep sections stored under names outside the fixed list
        sections.update({op: sec for op, sec in stored.sections.items() if op not in sections})
        return stored.model_copy(update={"sections": sections})

    # PUBLIC_INTERFACE
    def update_section(self, notes: PPMeetingNotes, operation: str, field: str, value: str) -> PPMeetingNotes:
        """Return notes with one field of one operation's section replaced."""
        _check_operation(operation)
        if field not in PPMeetingSection.model_fields:
            raise EngineValidationError(f"Unknown PP-meeting field {field!r}", {"field": field})
        section = notes.sections.get(operation) or PPMeetingSection()
        sections = dict(notes.sections)
        sections[operation] = section.model_copy(update={field: value})
        return notes.model_copy(update={"sections": sections})

    # PUBLIC_INTERFACE
    @operation_context("save_pp_meeting_notes")
    def save_notes(self, jobs: Iterable[JobBatch], style_id: str, notes: PPMeetingNotes) -> CollectionUpdate:
        """
        Store notes on a style and mark its PP meeting Completed.

        The inspection date becomes the meeting date. Sections left entirely
        blank are not stored.
        """
        for operation in notes.sections:
            _check_operation(operation)
        stored = notes.model_copy(
            update={"sections": {op: sec for op, sec in notes.sections.items() if not sec.is_blank()}}
        )
        meeting_date = stored.inspection_date or self.today()
        next_jobs = JobRepository(jobs).patch_style(
            style_id,
            pp_meeting_status=COMPLETED,
            pp_meeting_date=meeting_date,
            pp_meeting_notes=stored,
        )
        logger.info(
            "Saved PP-meeting notes for style %s (%d section(s)), meeting on %s",
            style_id, len(stored.sections), meeting_date.isoformat(),
        )
        return CollectionUpdate(jobs=next_jobs)
