from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PostTraining(BaseModel):
    time: datetime
    notes: str = ""


class PostTrainingResponse(BaseModel):
    uuid: str


class RescheduleRequest(BaseModel):
    time: datetime
    notes: str = ""


class Training(BaseModel):
    uuid: str
    user_uuid: str
    user: str
    time: datetime
    notes: str
    can_be_cancelled: bool
    proposed_time: Optional[datetime] = None
    move_proposed_by: Optional[str] = None


class Trainings(BaseModel):
    trainings: List[Training] = Field(default_factory=list)
