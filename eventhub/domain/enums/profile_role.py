from __future__ import annotations
from enum import StrEnum


class ProfileRole(StrEnum):
    admin = "admin"
    venue_manager = "venue_manager"
    supplier = "supplier"
    event_planner = "event_planner"
    user = "user"
