"""
member.py

회원 헤드 레코드(Member)와 좌석 배정(SeatAssignment) 모델 정의 파일.

Member 는 회원 1명당 하나만 존재하는 "현재 상태" 행이며,
요금 / 할인 / 채널별 납부액 / 미납액(due)의 합계를 보관한다.
기간별 스냅샷은 app.models.history.MembershipHistory 에 따로 남는다.

설계 원칙:
- due_amount = total_fee - discount - (cash + online) 를 쓰기 시점마다 다시 계산해 저장
- 상태(active / expired)는 저장하지 않고 조회 시 membership_end 로 계산
- (seat_id, shift_id) 쌍은 DB 유니크 제약으로 한 회원에게만 배정
- phone 은 회원 간 중복 불가

관련 파일:
- app.services.members   : 라이프사이클 오케스트레이터 (유일한 쓰기 주체)
- app.services.registry  : 좌석 / 사물함 배정
- app.services.payments  : 부분 납부 반영

"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean, Date, DateTime, ForeignKey, Index, Numeric, String, Text,
    UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.resource import utcnow


def member_status(membership_end: date, today: date | None = None) -> str:
    today = today or date.today()
    return "expired" if membership_end < today else "active"


class Member(Base):
    __tablename__ = "members"
    __table_args__ = (
        Index("ix_members_branch_id", "branch_id"),
        Index("ix_members_membership_end", "membership_end"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # 신원 정보
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    father_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    registration_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    id_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    branch_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("branches.id"), nullable=False)
    locker_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("lockers.id"), unique=True, nullable=True
    )

    membership_start: Mapped[date] = mapped_column(Date, nullable=False)
    membership_end: Mapped[date] = mapped_column(Date, nullable=False)

    # 금액 필드
    total_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    cash: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    online: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    due_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    # 보증금은 due 계산에 포함하지 않는다
    security_money: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    remark: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    def status(self, today: date | None = None) -> str:
        return member_status(self.membership_end, today)


class SeatAssignment(Base):
    """좌석 + 시간대 배정. seat_id 가 없으면 좌석 없이 시간대만 등록된 경우."""

    __tablename__ = "seat_assignments"
    __table_args__ = (
        UniqueConstraint("seat_id", "shift_id", name="uq_seat_assignments_seat_shift"),
        Index("ix_seat_assignments_member_id", "member_id"),
        Index("ix_seat_assignments_shift_id", "shift_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    seat_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("seats.id"), nullable=True)
    shift_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shifts.id"), nullable=False)
    member_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("members.id"), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
