from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from production_tracking.core.errors import EngineValidationError
from production_tracking.core.logging import operation_context
from production_tracking.repositories.logistics import ParcelRepository
from production_tracking.repositories.production import DevelopmentSampleRepository, JobRepository
from production_tracking.schemas.commands import (
    Consignee,
    DispatchDefaults,
    DispatchParcelCommand,
    DispatchResult,
)
from production_tracking.schemas.logistics import Parcel, ParcelOtherItem, ParcelSampleRef
from production_tracking.schemas.master_data import Buyer
from production_tracking.schemas.production import DevelopmentSample, JobBatch
from production_tracking.schemas.tracking import (
    CollectionUpdate,
    DevSampleOrigin,
    JobMaterialOrigin,
    JobSamplingOrigin,
    TrackingSnapshot,
    UnifiedRow,
)
from .aggregation import build_unified_rows, index_rows
from .base import BaseService

logger = logging.getLogger(__name__)

SUBMITTED = "Submitted"


def _item_type(row: UnifiedRow) -> str:
    if row.source == "Development":
        return "R&D Sampling"
    return "Material" if row.category == "Material" else "Sampling"


class ParcelService(BaseService):
    """
    Parcel dispatch, receipt and tracking updates.

    Dispatch touches up to three collections at once (jobs, development
    samples, parcels); every one of them is returned in a single
    CollectionUpdate and nothing is written until the caller applies it.
    """

    # PUBLIC_INTERFACE
    def dispatch_defaults(self, snapshot: TrackingSnapshot, selected_row_ids: Iterable[str]) -> DispatchDefaults:
        """
        Pre-fill the consignee from the buyer directory.

        Only when every selected row belongs to the same buyer; otherwise (or
        on a directory miss) the consignee fields stay blank.
        """
        rows = index_rows(build_unified_rows(snapshot.jobs, snapshot.development_samples, snapshot.parcels))
        selected = [rows[i] for i in selected_row_ids if i in rows]
        consignee = Consignee()
        buyers = {r.buyer for r in selected}
        if selected and len(buyers) == 1:
            buyer = self._buyer_by_name(snapshot.buyers, buyers.pop())
            if buyer is not None:
                address = buyer.default_address()
                contact = buyer.default_contact()
                consignee = Consignee(
                    buyer_id=buyer.id,
                    recipient_name=contact.name if contact else "",
                    phone=contact.phone if contact else "",
                    address=address.full_address if address else "",
                )
        return DispatchDefaults(consignee=consignee, courier=self.settings.DEFAULT_COURIER)

    # PUBLIC_INTERFACE
    @operation_context("dispatch_parcel")
    def dispatch_parcel(self, snapshot: TrackingSnapshot, command: DispatchParcelCommand) -> DispatchResult:
        """
        Create one parcel and submit every selected sample or material.

        Effects, returned together:
          - a new Sent parcel, placed first in the parcel collection
          - job sampling items and BOM lines of the selected rows -> Submitted
          - development samples of the selected rows -> Submitted

        Raises:
            EngineValidationError: consignee or address missing. No collection
            is changed in that case.
        """
        consignee = command.consignee
        if not consignee.buyer_id.strip() or not consignee.address.strip():
            logger.warning("Rejected dispatch: consignee and address are required")
            raise EngineValidationError(
                "Consignee and address are required",
                {"buyer_id": consignee.buyer_id, "address": consignee.address},
            )

        now = self.now()
        today = now.date()
        rows = index_rows(build_unified_rows(snapshot.jobs, snapshot.development_samples, snapshot.parcels))

        traced: List[UnifiedRow] = []
        free_form: List[ParcelOtherItem] = []
        for row_id in dict.fromkeys(command.selected_row_ids):
            row = rows.get(row_id)
            if row is None:
                # no origin to submit; it still ships as a plain line
                free_form.append(
                    ParcelOtherItem(
                        id=row_id,
                        name=row_id,
                        type="Sample",
                        purpose="Approval",
                        qty=1,
                        unit_value=self.settings.DEFAULT_SAMPLE_UNIT_VALUE,
                    )
                )
                continue
            traced.append(row)

        stamp = int(now.timestamp() * 1000)
        for idx, item in enumerate(command.other_items):
            free_form.append(
                ParcelOtherItem(
                    id=f"oi-{stamp}-{idx}",
                    name=item.name,
                    type=item.type,
                    purpose=item.purpose,
                    qty=item.qty,
                    unit_value=item.unit_value,
                )
            )

        samples = [
            ParcelSampleRef(
                id=row.origin.item_id,
                sam_number=row.ref_id,
                type=_item_type(row),
                description=f"{_item_type(row)}: {row.ref_id} ({row.type})",
                quantity=1,
                unit_value=self.settings.DEFAULT_SAMPLE_UNIT_VALUE,
                source_row_id=row.id,
            )
            for row in traced
        ]

        parcel_repo = ParcelRepository(snapshot.parcels)
        buyer = next((b for b in snapshot.buyers if b.id == consignee.buyer_id), None)
        skip = command.skip_shipment_info
        parcel = Parcel(
            id=f"PRC-{stamp}",
            parcel_no=self._parcel_number(parcel_repo.parcel_numbers()),
            buyer=buyer.name if buyer else "Unknown",
            recipient_name=consignee.recipient_name,
            recipient_phone=consignee.phone or None,
            address=consignee.address,
            courier=self.settings.PENDING_COURIER_PLACEHOLDER if skip else (command.courier or self.settings.DEFAULT_COURIER),
            tracking_no=self.settings.PENDING_TRACKING_PLACEHOLDER if skip else command.tracking_no,
            sent_date=today,
            status="Sent",
            samples=samples,
            other_items=free_form,
            is_tracking_pending=skip or not command.tracking_no.strip(),
        )

        jobs, dev_samples = self._submit(snapshot, traced, now)
        logger.info(
            "Dispatched parcel %s to %s: %d traced row(s), %d free-form line(s)",
            parcel.parcel_no, parcel.buyer, len(traced), len(free_form),
        )
        return DispatchResult(
            parcel=parcel,
            submitted_row_ids=[r.id for r in traced],
            update=CollectionUpdate(
                jobs=jobs,
                development_samples=dev_samples,
                parcels=parcel_repo.prepend(parcel),
            ),
        )

    # PUBLIC_INTERFACE
    @operation_context("mark_received")
    def mark_received(
        self, parcels: Iterable[Parcel], parcel_ids: Iterable[str], received_on: Optional[date] = None
    ) -> List[Parcel]:
        """Mark parcels Received (default date today). Unknown ids are ignored."""
        received_on = received_on or self.today()
        wanted = list(parcel_ids)
        result = ParcelRepository(parcels).mark_received(wanted, received_on)
        logger.info("Marked %d parcel(s) received on %s", len(wanted), received_on.isoformat())
        return result

    # PUBLIC_INTERFACE
    @operation_context("update_tracking")
    def update_tracking(self, parcels: Iterable[Parcel], parcel_id: str, courier: str, tracking_no: str) -> List[Parcel]:
        """Attach courier and tracking number; clears the pending-tracking flag."""
        result = ParcelRepository(parcels).patch(
            parcel_id, courier=courier, tracking_no=tracking_no, is_tracking_pending=False
        )
        logger.info("Updated tracking of parcel %s", parcel_id)
        return result

    def _parcel_number(self, taken: set) -> str:
        prefix = self.settings.PARCEL_NUMBER_PREFIX
        while True:
            number = f"{prefix}-{self.rng.randint(1000, 9999)}"
            if number not in taken:
                return number

    @staticmethod
    def _buyer_by_name(buyers: Iterable[Buyer], name: str) -> Optional[Buyer]:
        return next((b for b in buyers if b.name == name), None)

    @staticmethod
    def _submit(
        snapshot: TrackingSnapshot, rows: Iterable[UnifiedRow], now: datetime
    ) -> Tuple[List[JobBatch], List[DevelopmentSample]]:
        sampling: Dict[Tuple[str, str, str], Dict[str, Any]] = {}
        materials: Dict[Tuple[str, str, str], Dict[str, Any]] = {}
        dev: Dict[str, Dict[str, Any]] = {}
        for row in rows:
            origin = row.origin
            if isinstance(origin, JobSamplingOrigin):
                sampling[(origin.job_id, origin.style_id, origin.item_id)] = {"status": SUBMITTED, "last_updated": now}
            elif isinstance(origin, JobMaterialOrigin):
                materials[(origin.job_id, origin.style_id, origin.item_id)] = {
                    "sourcing_status": SUBMITTED,
                    "last_updated": now,
                }
            elif isinstance(origin, DevSampleOrigin):
                dev[origin.item_id] = {"status": SUBMITTED, "last_updated": now}
        jobs = JobRepository(snapshot.jobs).patch_items(sampling, materials)
        dev_samples = DevelopmentSampleRepository(snapshot.development_samples).patch_many(dev)
        return jobs, dev_samples
