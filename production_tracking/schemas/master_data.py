from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class BuyerAddress(BaseModel):
    """Buyer delivery/billing address."""
    id: str = Field(..., description="Address id")
    type: str = Field("Office", description="Address type label")
    full_address: str = Field(..., description="Printable address")
    city: str = Field("")
    country: str = Field("")
    phone: Optional[str] = Field(None)
    is_default: bool = Field(False)


class BuyerContact(BaseModel):
    """Buyer contact person."""
    id: str = Field(..., description="Contact id")
    name: str = Field(..., description="Contact name")
    designation: str = Field("")
    department: str = Field("Other")
    phone: str = Field("")
    email: str = Field("")
    is_default: bool = Field(False)


class Buyer(BaseModel):
    """Buyer directory entry (read-only reference data)."""
    id: str = Field(..., description="Buyer id")
    name: str = Field(..., description="Buyer name; matched against style/sample buyer fields")
    country: str = Field("")
    addresses: List[BuyerAddress] = Field(default_factory=list)
    contacts: List[BuyerContact] = Field(default_factory=list)

    def default_address(self) -> Optional[BuyerAddress]:
        """Address flagged default, else the first one."""
        for addr in self.addresses:
            if addr.is_default:
                return addr
        return self.addresses[0] if self.addresses else None

    def default_contact(self) -> Optional[BuyerContact]:
        """Contact flagged default, else the first one."""
        for contact in self.contacts:
            if contact.is_default:
                return contact
        return self.contacts[0] if self.contacts else None


class CompanyDetails(BaseModel):
    """Own company letterhead data; only consumed by external report generation."""
    name: str = Field(..., description="Company name")
    address: str = Field("")
    logo_url: Optional[str] = Field(None)
