import uuid
from typing import Optional

from pydantic import BaseModel

from app.schemas.common import Money


class LockerBoardItem(BaseModel):
    id: uuid.UUID
    locker_number: str
    branch_id: uuid.UUID
    branch_name: Optional[str]
    is_assigned: bool
    member_id: Optional[uuid.UUID]
    member_name: Optional[str]


class ShiftOccupancy(BaseModel):
    id: uuid.UUID
    title: str
    time: Optional[str]
    fee: Money
    member_count: int
