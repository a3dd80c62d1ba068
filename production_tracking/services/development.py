from __future__ import annotations

import logging
from typing import Iterable, Optional

from production_tracking.core.errors import EngineValidationError
from production_tracking.core.logging import operation_context
from production_tracking.repositories.production import DevelopmentSampleRepository
from production_tracking.schemas.commands import DevelopmentSampleDraft
from production_tracking.schemas.production import BOMItem, DevelopmentSample
from production_tracking.schemas.tracking import CollectionUpdate
from .base import BaseService

logger = logging.getLogger(__name__)


def _component_containing(bom: Iterable[BOMItem], needle: str) -> Optional[str]:
    for item in bom:
        if needle in item.component_name.lower():
            return item.component_name
    return None


class DevelopmentSampleService(BaseService):
    """R&D samples created outside any job."""

    # PUBLIC_INTERFACE
    def next_sam_number(self, development_samples: Iterable[DevelopmentSample]) -> str:
        """One past the highest numeric serial among DEV- numbers; DEV-001 when there is none."""
        prefix = f"{self.settings.DEV_SAMPLE_PREFIX}-"
        highest = 0
        for sample in development_samples:
            if not sample.sam_number.startswith(prefix):
                continue
            serial = sample.sam_number[len(prefix):].split("-")[0]
            if serial.isdigit():
                highest = max(highest, int(serial))
        return f"{prefix}{highest + 1:03d}"

    # PUBLIC_INTERFACE
    @operation_context("create_development_sample")
    def create_sample(
        self, development_samples: Iterable[DevelopmentSample], draft: DevelopmentSampleDraft
    ) -> CollectionUpdate:
        """
        Create a development sample from a draft and append it.

        Fabric, thread, zipper and lining descriptors are taken from the R&D
        BOM when a matching line exists.

        Raises:
            EngineValidationError: buyer or style number missing.
        """
        if not draft.buyer.strip() or not draft.style_no.strip():
            raise EngineValidationError(
                "Buyer and style number are required",
                {"buyer": draft.buyer, "style_no": draft.style_no},
            )

        repo = DevelopmentSampleRepository(development_samples)
        now = self.now()
        fabric = next((i.component_name for i in draft.bom if i.process_group == "Fabric"), None)
        sample = DevelopmentSample(
            id=f"dev-{int(now.timestamp() * 1000)}",
            sam_number=self.next_sam_number(repo.items),
            buyer=draft.buyer.strip(),
            style_no=draft.style_no.strip(),
            type=draft.type,
            description=draft.description,
            shade=draft.shade,
            wash=draft.wash,
            quantity=draft.quantity,
            deadline=draft.deadline,
            base_size=draft.base_size,
            fit_name=draft.fit_name,
            season=draft.season,
            is_testing_required=draft.is_testing_required,
            bom=draft.bom,
            fabric=fabric or "TBD",
            thread_color=_component_containing(draft.bom, "thread") or "Match",
            zipper_color=_component_containing(draft.bom, "zipper") or "Match",
            lining=_component_containing(draft.bom, "lining") or "-",
            status="Pending",
            current_stage="Not Started",
            last_updated=now,
        )
        logger.info("Created development sample %s for %s / %s", sample.sam_number, sample.buyer, sample.style_no)
        return CollectionUpdate(development_samples=repo.append(sample))
