from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .logistics import Parcel
from .master_data import Buyer, CompanyDetails
from .production import DevelopmentSample, IssuedWorkOrder, JobBatch

LightColor = Literal["red", "yellow", "orange", "green", "gray"]
LightKind = Literal["approval", "lab"]


class JobSamplingOrigin(BaseModel):
    """Row built from a sampling item inside a job style."""
    kind: Literal["job_sampling"] = "job_sampling"
    job_id: str
    style_id: str
    item_id: str


class JobMaterialOrigin(BaseModel):
    """Row built from a BOM line inside a job style."""
    kind: Literal["job_material"] = "job_material"
    job_id: str
    style_id: str
    item_id: str


class DevSampleOrigin(BaseModel):
    """Row built from a standalone development sample."""
    kind: Literal["dev_sample"] = "dev_sample"
    item_id: str


RowOrigin = Annotated[
    Union[JobSamplingOrigin, JobMaterialOrigin, DevSampleOrigin],
    Field(discriminator="kind"),
]


class ShipmentInfo(BaseModel):
    """Shipment metadata copied from the first parcel carrying an item."""
    sent_on: Optional[date] = None
    delivered_on: Optional[date] = None
    parcel_no: Optional[str] = None
    courier: Optional[str] = None
    tracking_no: Optional[str] = None
    parcel_status: Optional[str] = None


class UnifiedRow(ShipmentInfo):
    """Sample or material joined with its shipment metadata (view only)."""
    id: str = Field(..., description="Composite id: sam-<id> or bom-<id>")
    ref_id: str = Field(..., description="SAM # or supplier reference ('-' when absent)")
    source: Literal["Job", "Development"]
    parent_ref: str = Field(..., description="Owning job id, or 'R&D'")
    buyer: str = ""
    style: str = ""
    factory_ref: str = ""
    type: str = ""
    detail: str = ""
    category: Literal["Sample", "Material"]
    status: str
    lab_status: Optional[str] = None
    current_stage: str
    last_updated: Optional[datetime] = None
    approval_required: bool = False
    testing_required: bool = False
    feedback_text: Optional[str] = None
    comments_received_date: Optional[date] = None
    comments_sent_by: Optional[str] = None
    origin: RowOrigin


class StatusFlags(BaseModel):
    """Inputs of the traffic-light derivation."""
    approval_required: bool = False
    lab_required: bool = False
    status: Optional[str] = None
    lab_status: Optional[str] = None
    sent_on: Optional[date] = None
    delivered_on: Optional[date] = None


class TrafficLight(BaseModel):
    """Derived approval or lab indicator."""
    model_config = ConfigDict(frozen=True)

    color: LightColor
    label: str


class ApprovalTrackerRow(BaseModel):
    """Item awaiting buyer approval and/or lab testing."""
    id: str
    job_id: str
    factory_ref: str = "-"
    item_ref: str = "-"
    item_type: Literal["Fabric", "Sampling", "R&D Sampling"]
    item_detail: str = ""
    approval_required: bool
    lab_required: bool
    deadline: Optional[date] = None
    status: str = "Pending"
    lab_status: str = "Pending"
    current_stage: Optional[str] = None
    buyer: str = ""
    original_id: str
    parent_job_id: str
    parent_style_id: str
    sent_on: Optional[date] = None
    delivered_on: Optional[date] = None
    approval_light: TrafficLight
    lab_light: TrafficLight


class PPMeetingRow(BaseModel):
    """One style in the PP-meeting schedule."""
    id: str = Field(..., description="Style id")
    job_id: str
    buyer: str
    po_number: str = "-"
    factory_ref: str = "-"
    order_date: Optional[date] = None
    ship_date: Optional[date] = None
    planned_date: Optional[date] = None
    quantity: int = 0
    pp_meeting_date: str = "-"
    status: str = "Pending"
    has_notes: bool = False


class ReminderItem(BaseModel):
    """One delivered sample listed in a feedback reminder."""
    row_id: str
    ref_id: str
    type: str
    delivered_on: Optional[date] = None
    courier: Optional[str] = None
    tracking_no: Optional[str] = None
    days_since_receipt: int = 0


class ReminderBatch(BaseModel):
    """Data handed to external report generation for a buyer reminder."""
    buyer: str
    generated_on: date
    items: List[ReminderItem] = Field(default_factory=list)


class TrackingSnapshot(BaseModel):
    """All caller-owned collections an engine call reads."""
    jobs: List[JobBatch] = Field(default_factory=list)
    development_samples: List[DevelopmentSample] = Field(default_factory=list)
    parcels: List[Parcel] = Field(default_factory=list)
    issued_work_orders: List[IssuedWorkOrder] = Field(default_factory=list)
    buyers: List[Buyer] = Field(default_factory=list)
    company: Optional[CompanyDetails] = None


class CollectionUpdate(BaseModel):
    """
    Replacement collections produced by one orchestrator command.

    A collection left as None was not touched. Callers must apply every
    non-None collection together before the next engine call.
    """
    jobs: Optional[List[JobBatch]] = None
    development_samples: Optional[List[DevelopmentSample]] = None
    parcels: Optional[List[Parcel]] = None
    issued_work_orders: Optional[List[IssuedWorkOrder]] = None

    def changed_collections(self) -> List[str]:
        return [name for name in type(self).model_fields if getattr(self, name) is not None]

    def apply_to(self, snapshot: TrackingSnapshot) -> TrackingSnapshot:
        """Return the snapshot with every replaced collection swapped in."""
        return snapshot.model_copy(
            update={name: getattr(self, name) for name in self.changed_collections()}
        )
