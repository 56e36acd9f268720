from socialiser.models.user import User
from socialiser.models.core_value import CoreValue
from socialiser.models.friend import Friend
from socialiser.models.activity import Activity, ActivityValue
from socialiser.models.instance import (
    ActivityInstance,
    Participation,
    ParticipationStatus,
    PublicRSVP,
    VenueType,
)
from socialiser.models.location import Location
from socialiser.models.audit import AuditLog, AICallLog

__all__ = [
    "User",
    "CoreValue",
    "Friend",
    "Activity", "ActivityValue",
    "ActivityInstance", "Participation", "ParticipationStatus", "PublicRSVP", "VenueType",
    "Location",
    "AuditLog", "AICallLog",
]
