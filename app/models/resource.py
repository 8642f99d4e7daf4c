"""
resource.py

지점(Branch), 시간대(Shift), 좌석(Seat), 사물함(Locker) 모델 정의 파일.

이 참조 데이터는 원장 바깥에서 관리되며,
라이프사이클 서비스는 존재 여부 확인과 배정 상태 변경에만 사용한다.

설계 원칙:
- 사물함 배정 여부(is_assigned)는 member_id 가 있을 때만 참
  (CHECK 제약으로 DB 가 직접 보장)
- 한 회원은 최대 하나의 사물함만 점유 (member_id UNIQUE)
- 배정 상태는 회원 라이프사이클에서만 바뀐다

"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean, CheckConstraint, DateTime, ForeignKey, Numeric, String,
    UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Branch(Base):
    __tablename__ = "branches"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)


class Shift(Base):
    """반복되는 이용 시간대. 지점과 무관하게 공유된다."""

    __tablename__ = "shifts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    time: Mapped[str | None] = mapped_column(String(50), nullable=True)  # 예: "06:00-12:00"
    fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class Seat(Base):
    __tablename__ = "seats"
    __table_args__ = (
        UniqueConstraint("branch_id", "seat_number", name="uq_seats_branch_number"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    branch_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("branches.id"), nullable=False)
    seat_number: Mapped[str] = mapped_column(String(20), nullable=False)


class Locker(Base):
    __tablename__ = "lockers"
    __table_args__ = (
        UniqueConstraint("branch_id", "locker_number", name="uq_lockers_branch_number"),
        CheckConstraint(
            "(is_assigned AND member_id IS NOT NULL) OR (NOT is_assigned AND member_id IS NULL)",
            name="ck_lockers_assigned_member",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    branch_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("branches.id"), nullable=False)
    locker_number: Mapped[str] = mapped_column(String(20), nullable=False)

    is_assigned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # members.locker_id 와 순환 참조이므로 FK 는 ALTER 로 생성
    member_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("members.id", use_alter=True, name="fk_lockers_member_id"),
        unique=True,
        nullable=True,
    )
