from __future__ import annotations

from fastapi import APIRouter, Depends

from production_tracking.core.deps import get_parcel_service
from production_tracking.schemas.commands import DispatchDefaults, DispatchResult
from production_tracking.schemas.requests import (
    DispatchDefaultsRequest,
    DispatchRequest,
    MarkReceivedRequest,
    UpdateTrackingRequest,
)
from production_tracking.schemas.tracking import CollectionUpdate
from production_tracking.services.dispatch import ParcelService

router = APIRouter(prefix="/parcels", tags=["Parcels"])


# PUBLIC_INTERFACE
@router.post(
    "/defaults",
    response_model=DispatchDefaults,
    summary="Dispatch form defaults",
    description="Consignee pre-filled from the buyer directory when all selected rows share one buyer.",
)
def dispatch_defaults(
    payload: DispatchDefaultsRequest,
    service: ParcelService = Depends(get_parcel_service),
) -> DispatchDefaults:
    return service.dispatch_defaults(payload.snapshot, payload.selected_row_ids)


# PUBLIC_INTERFACE
@router.post(
    "/dispatch",
    response_model=DispatchResult,
    summary="Dispatch parcel",
    description=(
        "Create one parcel and mark every selected sample or material Submitted. "
        "Apply all collections of the returned update together."
    ),
)
def dispatch_parcel(
    payload: DispatchRequest,
    service: ParcelService = Depends(get_parcel_service),
) -> DispatchResult:
    return service.dispatch_parcel(payload.snapshot, payload.command)


# PUBLIC_INTERFACE
@router.post(
    "/receive",
    response_model=CollectionUpdate,
    summary="Mark parcels received",
    description="Mark parcels Received; unknown ids are ignored.",
)
def mark_received(
    payload: MarkReceivedRequest,
    service: ParcelService = Depends(get_parcel_service),
) -> CollectionUpdate:
    parcels = service.mark_received(
        payload.snapshot.parcels, payload.command.parcel_ids, payload.command.received_date
    )
    return CollectionUpdate(parcels=parcels)


# PUBLIC_INTERFACE
@router.post(
    "/tracking",
    response_model=CollectionUpdate,
    summary="Update parcel tracking",
    description="Attach courier and tracking number to a parcel dispatched without them.",
)
def update_tracking(
    payload: UpdateTrackingRequest,
    service: ParcelService = Depends(get_parcel_service),
) -> CollectionUpdate:
    cmd = payload.command
    parcels = service.update_tracking(payload.snapshot.parcels, cmd.parcel_id, cmd.courier, cmd.tracking_no)
    return CollectionUpdate(parcels=parcels)
