from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Set

from production_tracking.schemas.logistics import Parcel
from .base import BaseRepository


class ParcelRepository(BaseRepository[Parcel]):
    """Repository for parcels."""

    entity_name = "Parcel"

    def first_carrying(self, row_id: str, reference: str) -> Optional[Parcel]:
        """First parcel, in collection order, that carries the row."""
        for parcel in self.items:
            if parcel.carries(row_id, reference):
                return parcel
        return None

    def parcel_numbers(self) -> Set[str]:
        return {p.parcel_no for p in self.items}

    def mark_received(self, parcel_ids: Iterable[str], received_on: date) -> List[Parcel]:
        """Return new parcels with the given ids marked Received. Unknown ids are ignored."""
        wanted = set(parcel_ids)
        return [
            p.model_copy(update={"status": "Received", "received_date": received_on}) if p.id in wanted else p
            for p in self.items
        ]
