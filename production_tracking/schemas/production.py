from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field

PlanStatus = Literal["Pending Creation", "Drafting", "In Progress", "Approved"]
SampleStatus = Literal["Pending", "In Progress", "Approved", "Rejected", "Commented", "Testing", "Submitted"]
LabStatus = Literal["Pending", "Testing", "Sent", "Approved", "Rejected"]
SourcingStatus = Literal["Pending", "Sourced", "Ordered", "Received", "Testing", "Submitted", "Approved"]
ServiceStage = Literal["Cutting", "Embellishment", "Stitching", "Washing", "Finishing"]


class JobPlans(BaseModel):
    """Approval state of each process plan of a job."""
    fabric: PlanStatus = Field("Pending Creation")
    cutting: PlanStatus = Field("Pending Creation")
    trims: PlanStatus = Field("Pending Creation")
    embellishment: PlanStatus = Field("Pending Creation")
    stitching: PlanStatus = Field("Pending Creation")
    washing: PlanStatus = Field("Pending Creation")
    process: PlanStatus = Field("Pending Creation")
    finishing: PlanStatus = Field("Pending Creation")
    sampling: PlanStatus = Field("Pending Creation")
    testing: PlanStatus = Field("Pending Creation")


class BOMItem(BaseModel):
    """Sourced material/component line of a style (or of an R&D sample)."""
    id: str = Field(..., description="BOM line id")
    process_group: str = Field(..., description="Fabric, Stitching Trims, Packing Trims, ...")
    component_name: str = Field("")
    item_detail: str = Field("")
    supplier_ref: str = Field("", description="Supplier reference; parcel join key")
    vendor: str = Field("")
    sourcing_status: SourcingStatus = Field("Pending")
    lab_status: Optional[LabStatus] = Field(None)
    approval_required: bool = Field(
        False,
        validation_alias=AliasChoices("approval_required", "is_approved"),
        description="Buyer approval is required for this line",
    )
    is_testing_required: bool = Field(False)
    uom: str = Field("Pieces")
    last_updated: Optional[datetime] = Field(None)

    @property
    def reference(self) -> str:
        """Join key used for parcel lookups: supplier ref, else component name."""
        return self.supplier_ref or self.component_name


class SampleRow(BaseModel):
    """Physical sample request owned by a style."""
    id: str = Field(..., description="Sample id")
    sam_number: str = Field(..., description="SAM # reference; parcel join key")
    type: str = Field("", description="Sample type (Fit, PP, TOP, ...)")
    fabric: str = Field("")
    shade: str = Field("")
    wash: str = Field("")
    base_size: str = Field("")
    quantity: str = Field("1")
    deadline: Optional[date] = Field(None)
    status: SampleStatus = Field("Pending")
    lab_status: Optional[LabStatus] = Field(None)
    approval_required: bool = Field(
        False,
        validation_alias=AliasChoices("approval_required", "is_approved"),
        description="Buyer approval is required for this sample",
    )
    is_testing_required: bool = Field(False)
    current_stage: Optional[str] = Field(None)
    last_updated: Optional[datetime] = Field(None)
    comments_received_date: Optional[date] = Field(None)
    comments_sent_by: Optional[str] = Field(None)
    email_attachment_ref: Optional[str] = Field(None)
    feedback_text: Optional[str] = Field(None)


class DevelopmentSample(BaseModel):
    """R&D sample owned directly, without a parent job or style."""
    id: str = Field(..., description="Development sample id")
    sam_number: str = Field(..., description="SAM # reference (DEV-NNN)")
    buyer: str = Field(..., description="Buyer name")
    style_no: str = Field(..., description="Style number")
    type: str = Field("Development Sample")
    fabric: str = Field("TBD")
    shade: str = Field("")
    wash: str = Field("")
    base_size: str = Field("M")
    thread_color: str = Field("Match")
    zipper_color: str = Field("Match")
    lining: str = Field("-")
    quantity: str = Field("1")
    deadline: Optional[date] = Field(None)
    status: SampleStatus = Field("Pending")
    lab_status: Optional[LabStatus] = Field(None)
    is_testing_required: bool = Field(False)
    season: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)
    description: Optional[str] = Field(None)
    fit_name: Optional[str] = Field(None)
    current_stage: Optional[str] = Field(None)
    last_updated: Optional[datetime] = Field(None)
    comments_received_date: Optional[date] = Field(None)
    comments_sent_by: Optional[str] = Field(None)
    email_attachment_ref: Optional[str] = Field(None)
    feedback_text: Optional[str] = Field(None)
    bom: List[BOMItem] = Field(default_factory=list)


class PPMeetingSection(BaseModel):
    """Per-operation risk record of a PP meeting."""
    start_date: str = Field("")
    finish_date: str = Field("")
    critical_area: str = Field("")
    preventive_measure: str = Field("")
    concerned_person: str = Field("", description="Owner name")

    def is_blank(self) -> bool:
        return not any(
            (self.start_date, self.finish_date, self.critical_area, self.preventive_measure, self.concerned_person)
        )


class PPMeetingNotes(BaseModel):
    """Pre-production meeting notes of a style."""
    inspection_date: Optional[date] = Field(None)
    po_breakdown: str = Field("")
    sections: Dict[str, PPMeetingSection] = Field(default_factory=dict)


class Style(BaseModel):
    """Garment variant (order line) within a job."""
    id: str = Field(..., description="Style id")
    style_no: str = Field(..., description="Style number")
    buyer: str = Field(..., description="Buyer name")
    factory_ref: Optional[str] = Field(None)
    po_number: Optional[str] = Field(None)
    po_date: Optional[date] = Field(None)
    quantity: int = Field(0, ge=0)
    delivery_date: Optional[date] = Field(None)
    planned_date: Optional[date] = Field(None)
    plans: Optional[JobPlans] = Field(None, description="Overrides the job plans when present")
    pp_meeting_date: Optional[date] = Field(None)
    pp_meeting_status: Optional[str] = Field(None)
    pp_meeting_notes: Optional[PPMeetingNotes] = Field(None)
    sampling_details: List[SampleRow] = Field(default_factory=list)
    bom: List[BOMItem] = Field(default_factory=list)


class CuttingPlanDetail(BaseModel):
    """Approved cutting-plan line of a job; becomes cutting demand."""
    id: str = Field(..., description="Cutting plan line id")
    material_name: str = Field(..., description="Fabric being cut")
    shrinkage_length_pct: float = Field(0)
    shrinkage_width_pct: float = Field(0)
    extra_cutting_pct: float = Field(0)
    start_date: Optional[date] = Field(None)
    finish_date: Optional[date] = Field(None)


class WorkOrderRequest(BaseModel):
    """Request for an external production service."""
    id: str = Field(..., description="Request id")
    job_id: str = Field(..., description="Owning job id")
    service_name: str = Field(..., description="Requested service")
    stage: ServiceStage = Field(...)
    qty: float = Field(0, ge=0)
    unit: str = Field("pcs")
    status: Literal["Pending", "WO Issued", "Received"] = Field("Pending")
    date_requested: Optional[date] = Field(None)
    target_date: Optional[date] = Field(None)
    specs: str = Field("")


class IssuedWorkOrder(BaseModel):
    """Work order issued to a vendor; append-only."""
    id: str = Field(..., description="Work order id")
    wo_number: str = Field(..., description="Stage-prefixed work order number")
    vendor_name: str = Field(...)
    stage: str = Field(...)
    date_issued: date = Field(...)
    target_date: Optional[date] = Field(None)
    status: Literal["Issued", "In Progress", "Completed"] = Field("Issued")
    items: List[WorkOrderRequest] = Field(default_factory=list)
    notes: Optional[str] = Field(None)
    total_qty: float = Field(0)


class JobBatch(BaseModel):
    """Production batch owning an ordered list of styles."""
    id: str = Field(..., description="Job id")
    batch_name: str = Field("")
    styles: List[Style] = Field(default_factory=list)
    total_qty: float = Field(0, ge=0)
    status: str = Field("Planning")
    ex_factory_date: Optional[date] = Field(None)
    plans: JobPlans = Field(default_factory=JobPlans)
    cutting_plan_details: List[CuttingPlanDetail] = Field(default_factory=list)
    work_order_requests: List[WorkOrderRequest] = Field(default_factory=list)

    def plans_for(self, style: Style) -> JobPlans:
        """Effective plan approvals for a style of this job."""
        return style.plans or self.plans
