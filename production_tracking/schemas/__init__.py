"""
Public Pydantic schemas used by FastAPI routes, services, and tests.

Schemas are grouped by concern: production entities (jobs, styles, samples,
BOM lines, work orders), logistics (parcels), master data (buyers), derived
tracker views, engine commands, and the request envelopes of the HTTP API.
"""

from .common import MessageResponse  # noqa: F401
from .tracking import CollectionUpdate, TrackingSnapshot  # noqa: F401
