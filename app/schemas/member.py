import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional, List

from pydantic import BaseModel, ConfigDict, Field, StrictBool

from app.schemas.common import Money


# 가입 / 수정 / 갱신 공통 요청
# 필수값·금액 범위 검증은 서비스(app.services.members)에서 ValidationError 로 처리
class MemberWriteRequest(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    father_name: Optional[str] = None
    registration_number: Optional[str] = None
    id_number: Optional[str] = None

    branch_id: Optional[uuid.UUID] = None
    membership_start: Optional[date] = Field(default=None, examples=["2026-01-01"])
    membership_end: Optional[date] = Field(default=None, examples=["2026-01-31"])

    total_fee: Optional[Decimal] = Field(default=None, examples=[1000])
    discount: Optional[Decimal] = None
    cash: Optional[Decimal] = None
    online: Optional[Decimal] = None
    security_money: Optional[Decimal] = None
    remark: Optional[str] = None

    seat_id: Optional[uuid.UUID] = None
    shift_ids: List[uuid.UUID] = Field(default_factory=list)
    locker_id: Optional[uuid.UUID] = None


class PublicRegisterRequest(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    branch_id: Optional[uuid.UUID] = None
    email: Optional[str] = None
    address: Optional[str] = None
    father_name: Optional[str] = None
    registration_number: Optional[str] = None
    id_number: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    # "true" / 1 같은 값은 422
    is_active: StrictBool


class MemberResponse(BaseModel):
    id: uuid.UUID
    name: str
    phone: str
    email: Optional[str]
    address: Optional[str]
    father_name: Optional[str]
    registration_number: Optional[str]
    id_number: Optional[str]
    branch_id: uuid.UUID
    locker_id: Optional[uuid.UUID]
    membership_start: date
    membership_end: date
    total_fee: Money
    discount: Money
    cash: Money
    online: Money
    amount_paid: Money
    due_amount: Money
    security_money: Money
    remark: Optional[str]
    is_active: bool
    created_at: datetime
    status: Literal["active", "expired"]

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_member(cls, member, status: str) -> "MemberResponse":
        return cls.model_validate({**_columns(member), "status": status})


class MemberListItem(BaseModel):
    id: uuid.UUID
    name: str
    phone: str
    branch_id: uuid.UUID
    membership_start: date
    membership_end: date
    total_fee: Money
    due_amount: Money
    is_active: bool
    status: Literal["active", "expired"]
    seat_number: Optional[str] = None
    locker_number: Optional[str] = None


class AssignmentResponse(BaseModel):
    seat_id: Optional[uuid.UUID]
    shift_id: uuid.UUID
    seat_number: Optional[str]
    shift_title: str


class MemberDetailResponse(MemberResponse):
    branch_name: Optional[str] = None
    locker_number: Optional[str] = None
    assignments: List[AssignmentResponse] = Field(default_factory=list)


class HistoryResponse(BaseModel):
    id: uuid.UUID
    member_id: uuid.UUID
    period_no: int
    name: str
    phone: str
    branch_id: uuid.UUID
    seat_id: Optional[uuid.UUID]
    shift_id: Optional[uuid.UUID]
    locker_id: Optional[uuid.UUID]
    membership_start: date
    membership_end: date
    status: str
    total_fee: Money
    discount: Money
    cash: Money
    online: Money
    amount_paid: Money
    due_amount: Money
    security_money: Money
    remark: Optional[str]
    created_at: datetime
    changed_at: datetime

    model_config = ConfigDict(from_attributes=True)


def _columns(obj) -> dict:
    return {c.key: getattr(obj, c.key) for c in obj.__table__.columns}


def list_item(row: dict) -> MemberListItem:
    m = row["member"]
    return MemberListItem(
        id=m.id,
        name=m.name,
        phone=m.phone,
        branch_id=m.branch_id,
        membership_start=m.membership_start,
        membership_end=m.membership_end,
        total_fee=m.total_fee,
        due_amount=m.due_amount,
        is_active=m.is_active,
        status=row["status"],
        seat_number=row["seat_number"],
        locker_number=row["locker_number"],
    )


def detail_response(row: dict) -> MemberDetailResponse:
    return MemberDetailResponse.model_validate(
        {
            **_columns(row["member"]),
            "status": row["status"],
            "branch_name": row["branch_name"],
            "locker_number": row["locker_number"],
            "assignments": row["assignments"],
        }
    )
