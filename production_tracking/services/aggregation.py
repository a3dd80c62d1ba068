from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from production_tracking.core.errors import EntityNotFoundError
from production_tracking.repositories.logistics import ParcelRepository
from production_tracking.repositories.production import styles_of
from production_tracking.schemas.logistics import Parcel
from production_tracking.schemas.production import BOMItem, DevelopmentSample, JobBatch
from production_tracking.schemas.tracking import (
    DevSampleOrigin,
    JobMaterialOrigin,
    JobSamplingOrigin,
    ShipmentInfo,
    UnifiedRow,
)

logger = logging.getLogger(__name__)

DEFAULT_STAGE = "Not Started"


def sample_row_id(item_id: str) -> str:
    return f"sam-{item_id}"


def material_row_id(item_id: str) -> str:
    return f"bom-{item_id}"


def material_stage(item: BOMItem) -> str:
    """BOM lines have no WIP stage; show where the material stands instead."""
    if item.lab_status == "Testing":
        return "Testing"
    if item.sourcing_status == "Submitted":
        return "Submitted"
    return "Received"


# PUBLIC_INTERFACE
def find_shipment(parcels: ParcelRepository, row_id: str, reference: str) -> ShipmentInfo:
    """
    Shipment metadata of the first parcel carrying the row.

    A miss is not an error: every field is left as None.
    """
    parcel = parcels.first_carrying(row_id, reference)
    if parcel is None:
        return ShipmentInfo()
    return ShipmentInfo(
        sent_on=parcel.sent_date,
        delivered_on=parcel.received_date,
        parcel_no=parcel.parcel_no,
        courier=parcel.courier,
        tracking_no=parcel.tracking_no,
        parcel_status=parcel.status,
    )


# PUBLIC_INTERFACE
def build_unified_rows(
    jobs: Iterable[JobBatch],
    development_samples: Iterable[DevelopmentSample],
    parcels: Iterable[Parcel],
) -> List[UnifiedRow]:
    """
    Flatten job sampling items, job BOM lines and development samples into
    tracker rows joined with their shipment metadata.

    Order: for each job and style, sampling items then BOM lines; development
    samples last. Parcels are scanned afresh for every row.
    """
    parcel_repo = ParcelRepository(parcels)
    rows: List[UnifiedRow] = []

    for job, style in styles_of(jobs):
        for s in style.sampling_details:
            row_id = sample_row_id(s.id)
            rows.append(
                UnifiedRow(
                    id=row_id,
                    ref_id=s.sam_number,
                    source="Job",
                    parent_ref=job.id,
                    buyer=style.buyer,
                    style=style.style_no,
                    factory_ref=style.factory_ref or "",
                    type=s.type,
                    detail=f"{s.base_size} | {s.quantity} pcs",
                    category="Sample",
                    status=s.status,
                    lab_status=s.lab_status,
                    current_stage=s.current_stage or DEFAULT_STAGE,
                    last_updated=s.last_updated,
                    approval_required=s.approval_required,
                    testing_required=s.is_testing_required,
                    feedback_text=s.feedback_text,
                    comments_received_date=s.comments_received_date,
                    comments_sent_by=s.comments_sent_by,
                    origin=JobSamplingOrigin(job_id=job.id, style_id=style.id, item_id=s.id),
                    **find_shipment(parcel_repo, row_id, s.sam_number).model_dump(),
                )
            )
        for item in style.bom:
            row_id = material_row_id(item.id)
            rows.append(
                UnifiedRow(
                    id=row_id,
                    ref_id=item.supplier_ref or "-",
                    source="Job",
                    parent_ref=job.id,
                    buyer=style.buyer,
                    style=style.style_no,
                    factory_ref=style.factory_ref or "",
                    type=item.component_name,
                    detail=item.item_detail or "-",
                    category="Material",
                    status=item.sourcing_status,
                    lab_status=item.lab_status,
                    current_stage=material_stage(item),
                    last_updated=item.last_updated,
                    approval_required=item.approval_required,
                    testing_required=item.is_testing_required,
                    origin=JobMaterialOrigin(job_id=job.id, style_id=style.id, item_id=item.id),
                    **find_shipment(parcel_repo, row_id, item.reference).model_dump(),
                )
            )

    for s in development_samples:
        row_id = sample_row_id(s.id)
        rows.append(
            UnifiedRow(
                id=row_id,
                ref_id=s.sam_number,
                source="Development",
                parent_ref="R&D",
                buyer=s.buyer,
                style=s.style_no,
                factory_ref=s.style_no,
                type=s.type,
                detail=f"{s.base_size} | {s.quantity} pcs",
                category="Sample",
                status=s.status,
                lab_status=s.lab_status,
                current_stage=s.current_stage or DEFAULT_STAGE,
                last_updated=s.last_updated,
                approval_required=True,
                testing_required=s.is_testing_required,
                feedback_text=s.feedback_text,
                comments_received_date=s.comments_received_date,
                comments_sent_by=s.comments_sent_by,
                origin=DevSampleOrigin(item_id=s.id),
                **find_shipment(parcel_repo, row_id, s.sam_number).model_dump(),
            )
        )

    seen: Dict[str, int] = {}
    for row in rows:
        seen[row.id] = seen.get(row.id, 0) + 1
    duplicates = sorted(rid for rid, count in seen.items() if count > 1)
    if duplicates:
        logger.warning("Duplicate tracker row ids %s; lookups resolve to the first occurrence", duplicates)
    return rows


def index_rows(rows: Iterable[UnifiedRow]) -> Dict[str, UnifiedRow]:
    """Map row id to row, keeping the first occurrence of a duplicated id."""
    index: Dict[str, UnifiedRow] = {}
    for row in rows:
        index.setdefault(row.id, row)
    return index


def find_row(rows: Iterable[UnifiedRow], row_id: str) -> Optional[UnifiedRow]:
    return index_rows(rows).get(row_id)


def require_row(rows: Iterable[UnifiedRow], row_id: str) -> UnifiedRow:
    row = find_row(rows, row_id)
    if row is None:
        raise EntityNotFoundError(f"Tracker row {row_id} not found", {"row_id": row_id})
    return row
