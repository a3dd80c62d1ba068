"""
Tracking engine services.

Read side: aggregation joins samples, BOM lines and development samples
with parcels; views and wip project those rows for the trackers; status
derives the traffic lights.

Write side: every orchestrator operation takes the current collections and
returns a CollectionUpdate with the replacement collections.
"""
