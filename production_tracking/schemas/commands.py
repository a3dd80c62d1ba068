from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .logistics import Parcel
from .production import BOMItem, IssuedWorkOrder, PPMeetingNotes
from .tracking import CollectionUpdate

FeedbackOutcome = Literal["Approved", "Rejected", "Commented"]


class Consignee(BaseModel):
    """Receiving party of a parcel."""
    buyer_id: str = Field("", description="Buyer directory id")
    recipient_name: str = Field("")
    phone: str = Field("")
    address: str = Field("", description="Delivery address; required for dispatch")


class OtherItemInput(BaseModel):
    """Free-form parcel line entered by the user."""
    name: str = Field(..., min_length=1)
    type: str = Field("Swatch", description="Category (Swatch, Document, Trim, ...)")
    purpose: str = Field("Reference")
    qty: float = Field(1, ge=0)
    unit_value: float = Field(5, ge=0, description="Declared value per unit")


class DispatchParcelCommand(BaseModel):
    """Create one parcel and submit every selected sample/material."""
    consignee: Consignee = Field(default_factory=Consignee)
    courier: str = Field("")
    tracking_no: str = Field("")
    skip_shipment_info: bool = Field(False, description="Ship now, add courier/tracking later")
    selected_row_ids: List[str] = Field(default_factory=list, description="Tracker row ids (sam-*/bom-*)")
    other_items: List[OtherItemInput] = Field(default_factory=list)


class DispatchDefaults(BaseModel):
    """Pre-filled dispatch form values."""
    consignee: Consignee
    courier: str


class DispatchResult(BaseModel):
    """Outcome of a parcel dispatch."""
    parcel: Parcel
    submitted_row_ids: List[str] = Field(default_factory=list)
    update: CollectionUpdate


class MarkReceivedCommand(BaseModel):
    parcel_ids: List[str] = Field(default_factory=list)
    received_date: Optional[date] = Field(None, description="Defaults to today")


class UpdateTrackingCommand(BaseModel):
    parcel_id: str
    courier: str
    tracking_no: str


class RecordFeedbackCommand(BaseModel):
    """Buyer feedback for one sample row."""
    row_id: str = Field(..., description="Tracker row id (sam-*)")
    feedback_text: str = Field("")
    sent_by: str = Field("")
    received_date: Optional[date] = Field(None)
    outcome: FeedbackOutcome = Field("Commented")


class ReminderCommand(BaseModel):
    row_ids: List[str] = Field(default_factory=list)


class StageChangeCommand(BaseModel):
    row_id: str
    stage: str


class QualityCheckCommand(BaseModel):
    row_id: str
    passed: bool = Field(False, description="Quality check confirmed")


class StageChangeResult(BaseModel):
    """Either a committed stage change or a pending quality check."""
    row_id: str
    requested_stage: str
    committed: bool
    awaiting_quality_check: bool = False
    update: CollectionUpdate = Field(default_factory=CollectionUpdate)


class DevelopmentSampleDraft(BaseModel):
    """Input for a new R&D sample."""
    buyer: str = Field("")
    style_no: str = Field("")
    type: str = Field("Development Sample")
    description: Optional[str] = Field(None)
    shade: str = Field("")
    wash: str = Field("")
    quantity: str = Field("1")
    deadline: Optional[date] = Field(None)
    base_size: str = Field("M")
    fit_name: Optional[str] = Field(None)
    season: Optional[str] = Field(None)
    is_testing_required: bool = Field(False)
    bom: List[BOMItem] = Field(default_factory=list, description="R&D bill of materials")


class IssueWorkOrderCommand(BaseModel):
    demand_ids: List[str] = Field(default_factory=list)
    vendor: str = Field("")
    target_date: Optional[date] = Field(None)
    notes: str = Field("")


class IssueWorkOrderResult(BaseModel):
    work_order: IssuedWorkOrder
    update: CollectionUpdate


class SavePPMeetingCommand(BaseModel):
    style_id: str
    notes: PPMeetingNotes
