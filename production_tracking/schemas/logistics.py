from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ParcelSampleRef(BaseModel):
    """Structured parcel line pointing back at a sample or material."""
    id: str = Field(..., description="Source item id")
    sam_number: str = Field(..., description="Reference string of the shipped item")
    type: str = Field("Sample", description="Item type (Sampling, Fabric, R&D Sampling, ...)")
    description: str = Field("")
    quantity: float = Field(1, ge=0)
    unit_value: float = Field(0, ge=0)
    source_row_id: Optional[str] = Field(
        None, description="Composite tracker row id (sam-*/bom-*) the line was created from"
    )


class ParcelOtherItem(BaseModel):
    """Free-form parcel line (swatches, documents, ...)."""
    id: str = Field(..., description="Line id")
    name: str = Field(..., description="Line description; also matched as a reference string")
    type: str = Field("Swatch")
    purpose: str = Field("Reference")
    qty: float = Field(1, ge=0)
    unit_value: float = Field(0, ge=0)


class Parcel(BaseModel):
    """Outbound shipment to a buyer."""
    id: str = Field(..., description="Parcel id")
    parcel_no: str = Field(..., description="Parcel (AWB) number")
    buyer: str = Field(..., description="Buyer name")
    recipient_name: str = Field("")
    recipient_phone: Optional[str] = Field(None)
    address: str = Field("")
    courier: str = Field("")
    tracking_no: str = Field("")
    sent_date: date = Field(...)
    received_date: Optional[date] = Field(None)
    status: Literal["Sent", "Received"] = Field("Sent")
    samples: List[ParcelSampleRef] = Field(default_factory=list)
    other_items: List[ParcelOtherItem] = Field(default_factory=list)
    is_tracking_pending: bool = Field(False)

    @property
    def line_count(self) -> int:
        return len(self.samples) + len(self.other_items)

    def carries(self, row_id: str, reference: str) -> bool:
        """
        True when the parcel holds the row.

        Lines that carry a source_row_id match on that id only; older lines
        without one fall back to reference string equality.
        """
        for sample in self.samples:
            if sample.source_row_id is not None:
                if sample.source_row_id == row_id:
                    return True
            elif reference and sample.sam_number == reference:
                return True
        return bool(reference) and any(item.name == reference for item in self.other_items)
