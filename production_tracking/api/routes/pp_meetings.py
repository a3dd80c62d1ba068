from __future__ import annotations

from fastapi import APIRouter, Depends

from production_tracking.core.deps import get_pp_meeting_service
from production_tracking.core.errors import EntityNotFoundError
from production_tracking.repositories.production import JobRepository
from production_tracking.schemas.production import PPMeetingNotes
from production_tracking.schemas.requests import PPMeetingNotesRequest, SavePPMeetingRequest
from production_tracking.schemas.tracking import CollectionUpdate
from production_tracking.services.pp_meetings import PPMeetingService

router = APIRouter(prefix="/pp-meetings", tags=["PP Meetings"])


# PUBLIC_INTERFACE
@router.post(
    "/notes",
    response_model=PPMeetingNotes,
    summary="PP-meeting notes for editing",
    description="Stored notes of a style with every operation section present.",
)
def get_notes(
    payload: PPMeetingNotesRequest,
    service: PPMeetingService = Depends(get_pp_meeting_service),
) -> PPMeetingNotes:
    found = JobRepository(payload.snapshot.jobs).find_style(payload.style_id)
    if found is None:
        raise EntityNotFoundError(f"Style {payload.style_id} not found", {"id": payload.style_id})
    _, style = found
    return service.notes_for(style)


# PUBLIC_INTERFACE
@router.post(
    "/save",
    response_model=CollectionUpdate,
    summary="Save PP-meeting notes",
    description="Store notes and mark the style's PP meeting Completed on the inspection date.",
)
def save_notes(
    payload: SavePPMeetingRequest,
    service: PPMeetingService = Depends(get_pp_meeting_service),
) -> CollectionUpdate:
    return service.save_notes(payload.snapshot.jobs, payload.command.style_id, payload.command.notes)
