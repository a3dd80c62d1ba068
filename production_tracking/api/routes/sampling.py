from __future__ import annotations

from fastapi import APIRouter, Depends

from production_tracking.core.deps import get_development_service, get_feedback_service, get_wip_service
from production_tracking.schemas.commands import StageChangeResult
from production_tracking.schemas.requests import (
    DevelopmentSampleRequest,
    FeedbackRequest,
    QualityCheckRequest,
    ReminderRequest,
    StageChangeRequest,
)
from production_tracking.schemas.tracking import CollectionUpdate, ReminderBatch
from production_tracking.services.development import DevelopmentSampleService
from production_tracking.services.feedback import FeedbackService
from production_tracking.services.wip import WipStageService

router = APIRouter(prefix="/sampling", tags=["Sampling"])


# PUBLIC_INTERFACE
@router.post(
    "/feedback",
    response_model=CollectionUpdate,
    summary="Record buyer feedback",
    description="Store feedback and the Approved/Rejected/Commented outcome on a sample.",
)
def record_feedback(
    payload: FeedbackRequest,
    service: FeedbackService = Depends(get_feedback_service),
) -> CollectionUpdate:
    return service.record_feedback(payload.snapshot, payload.command)


# PUBLIC_INTERFACE
@router.post(
    "/reminder",
    response_model=ReminderBatch,
    summary="Feedback reminder data",
    description="Delivered samples of a single buyer with days since receipt, for reminder generation.",
)
def build_reminder(
    payload: ReminderRequest,
    service: FeedbackService = Depends(get_feedback_service),
) -> ReminderBatch:
    return service.build_reminder(payload.snapshot, payload.command.row_ids)


# PUBLIC_INTERFACE
@router.post(
    "/stage",
    response_model=StageChangeResult,
    summary="Select WIP stage",
    description="Commit a stage change, or request a quality check when Ready for Dispatch is selected.",
)
def select_stage(
    payload: StageChangeRequest,
    service: WipStageService = Depends(get_wip_service),
) -> StageChangeResult:
    return service.select_stage(payload.snapshot, payload.command.row_id, payload.command.stage)


# PUBLIC_INTERFACE
@router.post(
    "/stage/confirm",
    response_model=StageChangeResult,
    summary="Confirm quality check",
    description="Commit Ready for Dispatch when the quality check passed.",
)
def confirm_quality_check(
    payload: QualityCheckRequest,
    service: WipStageService = Depends(get_wip_service),
) -> StageChangeResult:
    return service.confirm_quality_check(payload.snapshot, payload.command.row_id, payload.command.passed)


# PUBLIC_INTERFACE
@router.post(
    "/development",
    response_model=CollectionUpdate,
    summary="Create development sample",
    description="Create an R&D sample with the next DEV number.",
)
def create_development_sample(
    payload: DevelopmentSampleRequest,
    service: DevelopmentSampleService = Depends(get_development_service),
) -> CollectionUpdate:
    return service.create_sample(payload.snapshot.development_samples, payload.draft)
