"""
services/history.py

회원 이력(History Trail) 비즈니스 로직 모음.

이력 한 행은 하나의 청구 기간(period)에 대한 스냅샷이다.
쓰기 방식은 호출 측이 HistoryWrite 값으로 명시한다.

- HistoryWrite.NEW_PERIOD : 새 기간 시작 (가입 / 갱신) → 행 추가
- HistoryWrite.CORRECTION : 현재 기간 정정 (수정)      → 가장 최근 행 덮어쓰기

설계 원칙:
- "가장 최근 행"은 period_no 가 가장 큰 행
- period_no 는 (member_id, period_no) 유니크 제약으로 중복 불가
- 이미 닫힌 이전 기간 행은 납부 반영 외에는 변경하지 않음

"""

import logging
from datetime import date
from enum import Enum

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.models.history import MembershipHistory
from app.models.member import Member, member_status
from app.models.resource import utcnow

logger = logging.getLogger(__name__)


class HistoryWrite(str, Enum):
    NEW_PERIOD = "NEW_PERIOD"
    CORRECTION = "CORRECTION"


# 헤드 레코드에서 그대로 복사되는 필드
SNAPSHOT_FIELDS = (
    "name", "phone", "email", "address", "father_name", "registration_number", "id_number",
    "branch_id", "locker_id", "membership_start", "membership_end",
    "total_fee", "discount", "cash", "online", "amount_paid", "due_amount",
    "security_money", "remark",
)


def snapshot(member: Member, *, seat_id=None, shift_id=None, today: date | None = None) -> dict:
    data = {f: getattr(member, f) for f in SNAPSHOT_FIELDS}
    data["seat_id"] = seat_id
    data["shift_id"] = shift_id
    data["status"] = member_status(member.membership_end, today)
    return data


def latest_for(db: Session, member_id) -> MembershipHistory | None:
    return db.scalar(
        select(MembershipHistory)
        .where(MembershipHistory.member_id == member_id)
        .order_by(MembershipHistory.period_no.desc())
        .limit(1)
    )


def append(db: Session, member: Member, period: dict) -> MembershipHistory:
    last_no = db.scalar(
        select(func.max(MembershipHistory.period_no)).where(MembershipHistory.member_id == member.id)
    )
    row = MembershipHistory(member_id=member.id, period_no=(last_no or 0) + 1, **period)
    db.add(row)
    db.flush()
    return row


def overwrite_most_recent(db: Session, member: Member, period: dict) -> MembershipHistory:
    row = latest_for(db, member.id)
    if row is None:
        raise NotFound(f"No history period to correct for member {member.id}")

    for key, value in period.items():
        setattr(row, key, value)
    row.changed_at = utcnow()
    db.flush()
    return row


def record_period(db: Session, member: Member, kind: HistoryWrite, period: dict) -> MembershipHistory:
    if kind is HistoryWrite.NEW_PERIOD:
        row = append(db, member, period)
    else:
        row = overwrite_most_recent(db, member, period)
    logger.debug(
        "history %s", kind.value,
        extra={"member_id": str(member.id), "period_no": row.period_no},
    )
    return row
