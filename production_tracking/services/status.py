from __future__ import annotations

from production_tracking.schemas.tracking import LightKind, StatusFlags, TrafficLight

NOT_APPLICABLE = TrafficLight(color="gray", label="(N/A)")
APPROVED = TrafficLight(color="green", label="(APPROVED)")
WAITING_FEEDBACK = TrafficLight(color="orange", label="(WAITING FEEDBACK)")
SENT = TrafficLight(color="yellow", label="(SENT)")
PENDING = TrafficLight(color="red", label="(PENDING)")

# Approval tracker filter names mapped to light colors
FILTER_COLORS = {
    "Pending": "red",
    "Send": "yellow",
    "Received": "orange",
    "Approved": "green",
}


# PUBLIC_INTERFACE
def derive_light_status(kind: LightKind, flags: StatusFlags) -> TrafficLight:
    """
    Map approval or lab flags to a traffic light. First matching rule wins:

      1. requirement flag off          -> gray   (N/A)
      2. outcome Approved              -> green  (APPROVED)
      3. delivered                     -> orange (WAITING FEEDBACK)
         lab: only while lab_status is Testing
      4. sent                          -> yellow (SENT)
         approval: sent_on set or status Submitted
         lab: lab_status Testing or Sent
      5. otherwise                     -> red    (PENDING)
    """
    delivered = flags.delivered_on is not None
    if kind == "approval":
        if not flags.approval_required:
            return NOT_APPLICABLE
        if flags.status == "Approved":
            return APPROVED
        if delivered:
            return WAITING_FEEDBACK
        if flags.sent_on is not None or flags.status == "Submitted":
            return SENT
        return PENDING

    if not flags.lab_required:
        return NOT_APPLICABLE
    if flags.lab_status == "Approved":
        return APPROVED
    if delivered and flags.lab_status == "Testing":
        return WAITING_FEEDBACK
    if flags.lab_status in ("Testing", "Sent"):
        return SENT
    return PENDING
