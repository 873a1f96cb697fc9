from typing import Literal, Optional

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    uuid: str
    user_type: Literal["trainer", "attendee"]
    name: str = Field(min_length=1)
    email: Optional[str] = None
    balance: int = Field(default=0, ge=0)


class UserResponse(BaseModel):
    display_name: str
    balance: int
    role: str


class BalanceUpdate(BaseModel):
    amount_change: int
    idempotency_key: Optional[str] = None


class BalanceResponse(BaseModel):
    uuid: str
    balance: int
