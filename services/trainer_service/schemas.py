from datetime import date, datetime
from typing import List

from pydantic import BaseModel, Field


class HourUpdate(BaseModel):
    hours: List[datetime] = Field(min_length=1)


class HourRequest(BaseModel):
    hour: datetime


class MoveTrainingRequest(BaseModel):
    new_time: datetime
    original_time: datetime


class Hour(BaseModel):
    hour: datetime
    available: bool
    has_training_scheduled: bool


class Date(BaseModel):
    date: date
    has_free_hours: bool
    hours: List[Hour]


class HourAvailabilityResponse(BaseModel):
    hour: datetime
    is_available: bool
