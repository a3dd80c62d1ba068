"""
API route modules of the tracking engine.

This package contains subrouters for:
- Views: unified rows, approval/comments trackers, demand, PP meetings, WIP board
- Parcels: dispatch, dispatch defaults, receipt, tracking updates
- Sampling: feedback, reminders, WIP stage changes, development samples
- Work Orders: issuance
- PP Meetings: notes retrieval and saving

Routers are included from production_tracking.api.main (under the /api/v1 prefix).
"""
