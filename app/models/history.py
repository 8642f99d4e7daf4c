"""
history.py

회원 이력(MembershipHistory)과 납부 기록(Payment) 모델 정의 파일.

MembershipHistory 한 행은 하나의 청구 기간(period)을 나타내며,
라이프사이클 전환 시점의 금액 / 날짜 / 배정 정보를 그대로 복사한 스냅샷이다.

- 가입(Enroll) / 갱신(Renew) : 새 행 추가 (period_no + 1)
- 수정(Edit)                 : 가장 최근 행을 제자리에서 덮어씀
- 납부(ApplyPayment)         : 특정 행의 cash / online / amount_paid / due 를 조정

Payment 는 ApplyPayment 한 건마다 남는 불변 기록이다.

"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text,
    UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.resource import utcnow


class MembershipHistory(Base):
    __tablename__ = "membership_history"
    __table_args__ = (
        # 같은 회원의 기간 번호는 중복될 수 없음 (동시 append 방지)
        UniqueConstraint("member_id", "period_no", name="uq_membership_history_member_period"),
        Index("ix_membership_history_branch_id", "branch_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    member_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("members.id"), nullable=False, index=True)
    period_no: Mapped[int] = mapped_column(Integer, nullable=False)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    father_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    registration_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    id_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    branch_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("branches.id"), nullable=False)
    seat_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("seats.id"), nullable=True)
    shift_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("shifts.id"), nullable=True)
    locker_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("lockers.id"), nullable=True)

    membership_start: Mapped[date] = mapped_column(Date, nullable=False)
    membership_end: Mapped[date] = mapped_column(Date, nullable=False)
    # 스냅샷 시점의 상태 (이후 갱신되지 않음)
    status: Mapped[str] = mapped_column(String(10), nullable=False)

    total_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    cash: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    online: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    due_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    security_money: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    remark: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    changed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class Payment(Base):
    """이력 행 하나에 대해 반영된 부분 납부 1건."""

    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_history_id", "history_id"),
        Index("ix_payments_member_id", "member_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    history_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("membership_history.id"), nullable=False)
    member_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("members.id"), nullable=False)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    channel: Mapped[str] = mapped_column(String(10), nullable=False)  # cash / online

    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
