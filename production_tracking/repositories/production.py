from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from production_tracking.core.errors import EntityNotFoundError
from production_tracking.schemas.production import (
    DevelopmentSample,
    IssuedWorkOrder,
    JobBatch,
    Style,
)
from .base import BaseRepository


class JobRepository(BaseRepository[JobBatch]):
    """Repository for jobs and the styles, samples and BOM lines they own."""

    entity_name = "Job"

    def find_style(self, style_id: str) -> Optional[Tuple[JobBatch, Style]]:
        for job in self.items:
            for style in job.styles:
                if style.id == style_id:
                    return job, style
        return None

    def patch_style(self, style_id: str, **changes: Any) -> List[JobBatch]:
        """Return new jobs where one style carries the changes."""
        if self.find_style(style_id) is None:
            raise EntityNotFoundError(f"Style {style_id} not found", {"id": style_id})
        return self._rewrite_styles({style_id: changes}, {}, {})

    def patch_items(
        self,
        sampling: Dict[Tuple[str, str, str], Dict[str, Any]],
        materials: Dict[Tuple[str, str, str], Dict[str, Any]],
    ) -> List[JobBatch]:
        """
        Return new jobs with sampling items and BOM lines patched in place.

        Keys are (job_id, style_id, item_id) triples. Jobs and styles that hold
        none of the keys are passed through untouched.
        """
        return self._rewrite_styles({}, sampling, materials)

    def _rewrite_styles(
        self,
        style_changes: Dict[str, Dict[str, Any]],
        sampling: Dict[Tuple[str, str, str], Dict[str, Any]],
        materials: Dict[Tuple[str, str, str], Dict[str, Any]],
    ) -> List[JobBatch]:
        next_jobs: List[JobBatch] = []
        for job in self.items:
            job_updated = False
            next_styles: List[Style] = []
            for style in job.styles:
                update: Dict[str, Any] = dict(style_changes.get(style.id, {}))
                next_sampling = [
                    s.model_copy(update=sampling[(job.id, style.id, s.id)])
                    if (job.id, style.id, s.id) in sampling
                    else s
                    for s in style.sampling_details
                ]
                if any((job.id, style.id, s.id) in sampling for s in style.sampling_details):
                    update["sampling_details"] = next_sampling
                next_bom = [
                    b.model_copy(update=materials[(job.id, style.id, b.id)])
                    if (job.id, style.id, b.id) in materials
                    else b
                    for b in style.bom
                ]
                if any((job.id, style.id, b.id) in materials for b in style.bom):
                    update["bom"] = next_bom
                if update:
                    job_updated = True
                    next_styles.append(style.model_copy(update=update))
                else:
                    next_styles.append(style)
            next_jobs.append(job.model_copy(update={"styles": next_styles}) if job_updated else job)
        return next_jobs


class DevelopmentSampleRepository(BaseRepository[DevelopmentSample]):
    """Repository for standalone R&D samples."""

    entity_name = "Development sample"

    def patch_many(self, changes: Dict[str, Dict[str, Any]]) -> List[DevelopmentSample]:
        return [
            item.model_copy(update=changes[item.id]) if item.id in changes else item
            for item in self.items
        ]


class IssuedWorkOrderRepository(BaseRepository[IssuedWorkOrder]):
    """Repository for issued work orders (append-only)."""

    entity_name = "Work order"

    def issued_item_ids(self) -> Set[str]:
        """Ids of every demand item already bundled into a work order."""
        return {item.id for wo in self.items for item in wo.items}

    def wo_numbers(self) -> Set[str]:
        return {wo.wo_number for wo in self.items}


def styles_of(jobs: Iterable[JobBatch]) -> Iterable[Tuple[JobBatch, Style]]:
    """Yield (job, style) pairs in iteration order."""
    for job in jobs:
        for style in job.styles:
            yield job, style
