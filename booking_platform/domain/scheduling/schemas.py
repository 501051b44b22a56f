"""Scheduling schemas - Pydantic models for availability responses"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class TimeSlotResponse(BaseModel):
    startTime: datetime  # UTC
    endTime: datetime
    isAvailable: bool
    currentAttendees: Optional[int] = None
    maxCapacity: Optional[int] = None
    spotsRemaining: Optional[int] = None

    @classmethod
    def from_slot(cls, slot) -> "TimeSlotResponse":
        return cls(
            startTime=slot.start,
            endTime=slot.end,
            isAvailable=slot.is_available,
            currentAttendees=slot.current_attendees,
            maxCapacity=slot.max_capacity,
            spotsRemaining=slot.spots_remaining,
        )
