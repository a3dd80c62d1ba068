from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .commands import (
    DevelopmentSampleDraft,
    DispatchParcelCommand,
    IssueWorkOrderCommand,
    MarkReceivedCommand,
    QualityCheckCommand,
    RecordFeedbackCommand,
    ReminderCommand,
    SavePPMeetingCommand,
    StageChangeCommand,
    UpdateTrackingCommand,
)
from .tracking import TrackingSnapshot, UnifiedRow


class SnapshotRequest(BaseModel):
    """Request body carrying the collections an endpoint operates on."""
    snapshot: TrackingSnapshot = Field(default_factory=TrackingSnapshot)


class SearchRequest(SnapshotRequest):
    search: Optional[str] = Field(None, description="Case-insensitive substring filter")


class ApprovalTrackerRequest(SearchRequest):
    status_filter: Literal["All", "Pending", "Send", "Received", "Approved"] = Field("All")


class CommentsTrackerRequest(SearchRequest):
    status_filter: Literal["All", "Pending", "Feedback received"] = Field("All")


class WipBoardRequest(SearchRequest):
    stage_filter: str = Field("All", description="All, Dispatched or a WIP stage name")


class WipBoard(BaseModel):
    """WIP board rows plus per-stage counts."""
    rows: List[UnifiedRow] = Field(default_factory=list)
    counts: Dict[str, int] = Field(default_factory=dict)


class DispatchDefaultsRequest(SnapshotRequest):
    selected_row_ids: List[str] = Field(default_factory=list)


class DispatchRequest(SnapshotRequest):
    command: DispatchParcelCommand


class MarkReceivedRequest(SnapshotRequest):
    command: MarkReceivedCommand


class UpdateTrackingRequest(SnapshotRequest):
    command: UpdateTrackingCommand


class FeedbackRequest(SnapshotRequest):
    command: RecordFeedbackCommand


class ReminderRequest(SnapshotRequest):
    command: ReminderCommand


class StageChangeRequest(SnapshotRequest):
    command: StageChangeCommand


class QualityCheckRequest(SnapshotRequest):
    command: QualityCheckCommand


class DevelopmentSampleRequest(SnapshotRequest):
    draft: DevelopmentSampleDraft


class IssueWorkOrderRequest(SnapshotRequest):
    command: IssueWorkOrderCommand


class PPMeetingNotesRequest(SnapshotRequest):
    style_id: str


class SavePPMeetingRequest(SnapshotRequest):
    command: SavePPMeetingCommand
