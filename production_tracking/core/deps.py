from __future__ import annotations

from fastapi import Depends

from production_tracking.core.settings import AppSettings, get_app_settings
from production_tracking.services.development import DevelopmentSampleService
from production_tracking.services.dispatch import ParcelService
from production_tracking.services.feedback import FeedbackService
from production_tracking.services.pp_meetings import PPMeetingService
from production_tracking.services.wip import WipStageService
from production_tracking.services.work_orders import WorkOrderService


# PUBLIC_INTERFACE
def get_settings() -> AppSettings:
    """Settings dependency; override in tests through app.dependency_overrides."""
    return get_app_settings()


# PUBLIC_INTERFACE
def get_parcel_service(settings: AppSettings = Depends(get_settings)) -> ParcelService:
    return ParcelService(settings)


# PUBLIC_INTERFACE
def get_feedback_service(settings: AppSettings = Depends(get_settings)) -> FeedbackService:
    return FeedbackService(settings)


# PUBLIC_INTERFACE
def get_wip_service(settings: AppSettings = Depends(get_settings)) -> WipStageService:
    return WipStageService(settings)


# PUBLIC_INTERFACE
def get_work_order_service(settings: AppSettings = Depends(get_settings)) -> WorkOrderService:
    return WorkOrderService(settings)


# PUBLIC_INTERFACE
def get_pp_meeting_service(settings: AppSettings = Depends(get_settings)) -> PPMeetingService:
    return PPMeetingService(settings)


# PUBLIC_INTERFACE
def get_development_service(settings: AppSettings = Depends(get_settings)) -> DevelopmentSampleService:
    return DevelopmentSampleService(settings)
