from __future__ import annotations

import random
from datetime import date, datetime, timezone

import pytest

from production_tracking.core.settings import AppSettings
from production_tracking.schemas.logistics import Parcel, ParcelSampleRef
from production_tracking.schemas.master_data import Buyer, BuyerAddress, BuyerContact
from production_tracking.schemas.production import (
    BOMItem,
    CuttingPlanDetail,
    DevelopmentSample,
    JobBatch,
    JobPlans,
    SampleRow,
    Style,
    WorkOrderRequest,
)
from production_tracking.schemas.tracking import TrackingSnapshot

NOW = datetime(2024, 5, 10, 9, 30, tzinfo=timezone.utc)
TODAY = NOW.date()


def fixed_clock() -> datetime:
    return NOW


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings()


@pytest.fixture
def make_service(settings):
    """Build a service with a fixed clock and a seeded random source."""

    def _make(cls):
        return cls(settings, clock=fixed_clock, rng=random.Random(7))

    return _make


def _acme_job() -> JobBatch:
    style = Style(
        id="sty-1",
        style_no="ST-100",
        buyer="Acme Apparel",
        factory_ref="FR-1",
        po_number="PO-9",
        po_date=date(2024, 3, 1),
        quantity=1200,
        delivery_date=date(2024, 6, 20),
        planned_date=date(2024, 6, 1),
        sampling_details=[
            SampleRow(
                id="s1",
                sam_number="SAM-1001",
                type="Fit",
                base_size="M",
                quantity="2",
                is_approved=True,
                status="Pending",
                current_stage="Stitching",
                last_updated=datetime(2024, 5, 2, tzinfo=timezone.utc),
            ),
            SampleRow(
                id="s2",
                sam_number="SAM-1002",
                type="PP",
                is_testing_required=True,
                lab_status="Pending",
                current_stage="Dispatched",
                last_updated=datetime(2024, 5, 3, tzinfo=timezone.utc),
            ),
        ],
        bom=[
            BOMItem(
                id="b1",
                process_group="Fabric",
                component_name="Cotton Twill",
                supplier_ref="FAB-77",
                is_approved=True,
                sourcing_status="Received",
            ),
            BOMItem(
                id="b2",
                process_group="Stitching Trims",
                component_name="Thread",
                supplier_ref="TH-1",
                is_approved=True,
            ),
        ],
    )
    return JobBatch(
        id="JOB-001",
        batch_name="Summer Chinos",
        styles=[style],
        total_qty=1200,
        ex_factory_date=date(2024, 7, 1),
        plans=JobPlans(fabric="Approved", sampling="Approved", cutting="Approved"),
        cutting_plan_details=[
            CuttingPlanDetail(
                id="cp-1",
                material_name="Cotton Twill",
                shrinkage_length_pct=3,
                shrinkage_width_pct=2.5,
                extra_cutting_pct=5,
            )
        ],
        work_order_requests=[
            WorkOrderRequest(
                id="wor-1",
                job_id="JOB-001",
                service_name="Garment Wash",
                stage="Washing",
                qty=1200,
                target_date=date(2024, 6, 15),
            )
        ],
    )


def _borealis_job() -> JobBatch:
    style = Style(
        id="sty-2",
        style_no="ST-200",
        buyer="Borealis",
        quantity=500,
        sampling_details=[
            SampleRow(
                id="s3",
                sam_number="SAM-2001",
                type="TOP",
                is_approved=True,
                status="Submitted",
                current_stage="Received",
            ),
        ],
        bom=[
            BOMItem(
                id="b3",
                process_group="Fabric",
                component_name="Denim 12oz",
                supplier_ref="DN-12",
                is_approved=True,
            ),
        ],
    )
    return JobBatch(id="JOB-002", batch_name="Denim Jackets", styles=[style], total_qty=500)


@pytest.fixture
def snapshot() -> TrackingSnapshot:
    """Two jobs, one R&D sample and a legacy parcel matched by reference only."""
    return TrackingSnapshot(
        jobs=[_acme_job(), _borealis_job()],
        development_samples=[
            DevelopmentSample(
                id="d1",
                sam_number="DEV-007",
                buyer="Acme Apparel",
                style_no="RD-1",
                type="Proto",
                current_stage="Pattern Making",
                last_updated=datetime(2024, 5, 5, tzinfo=timezone.utc),
            )
        ],
        parcels=[
            Parcel(
                id="PRC-old",
                parcel_no="EXP-1111",
                buyer="Borealis",
                courier="FedEx",
                tracking_no="FX-1",
                sent_date=date(2024, 5, 1),
                received_date=date(2024, 5, 4),
                status="Received",
                samples=[ParcelSampleRef(id="s3", sam_number="SAM-2001", type="Sampling")],
            )
        ],
        buyers=[
            Buyer(
                id="buy-1",
                name="Acme Apparel",
                addresses=[
                    BuyerAddress(id="a1", full_address="1 Main St, Leeds"),
                    BuyerAddress(id="a2", full_address="2 Dock Rd, Hull", is_default=True),
                ],
                contacts=[BuyerContact(id="c1", name="Jane Doe", phone="+44 100")],
            ),
            Buyer(
                id="buy-2",
                name="Borealis",
                addresses=[BuyerAddress(id="a3", full_address="Fjordgata 5, Oslo")],
            ),
        ],
    )
