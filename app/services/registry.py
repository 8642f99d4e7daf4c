"""
services/registry.py

좌석·사물함 배정(Resource Registry) 비즈니스 로직 모음.

이 파일은 "이 좌석+시간대가 비어 있는가?", "이 사물함이 비어 있는가?"에 답하고,
라이프사이클 서비스의 요청에 따라 배정/해제를 수행한다.

설계 원칙:
- 배정 여부를 먼저 조회한 뒤 쓰는(check-then-act) 방식은 사용하지 않음
- (seat_id, shift_id) 유니크 제약과 조건부 UPDATE 로 DB 가 배타성을 직접 판정
- 충돌은 Conflict 로 변환되고, 호출 측 트랜잭션 전체가 롤백됨
- commit 은 하지 않음 (app.db.transaction.atomic 이 담당)

관련 파일:
- app.models.member      : SeatAssignment / Member 모델
- app.models.resource    : Seat / Shift / Locker 모델
- app.services.members   : 라이프사이클 오케스트레이터

"""

import logging

from sqlalchemy import delete, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import Conflict
from app.models.member import Member, SeatAssignment
from app.models.resource import Locker, Seat, Shift

logger = logging.getLogger(__name__)


"""
좌석 + 시간대 배정

- INSERT 자체가 배타성 판정 (uq_seat_assignments_seat_shift)
- 다른 회원이 이미 점유 중이면 Conflict
- seat 이 None 이면 좌석 없이 시간대만 등록 (유니크 제약 대상 아님)

"""

def reserve_assignment(db: Session, seat: Seat | None, shift: Shift, member: Member) -> SeatAssignment:
    # flush 실패 후에는 세션 객체를 읽을 수 없으므로 메시지 재료를 먼저 꺼내 둔다
    seat_id = seat.id if seat else None
    seat_label = seat.seat_number if seat else "-"
    shift_id = shift.id
    shift_title = shift.title
    member_id = member.id

    assignment = SeatAssignment(seat_id=seat_id, shift_id=shift_id, member_id=member_id)
    db.add(assignment)
    try:
        db.flush()
    except IntegrityError as e:
        logger.warning(
            "seat assignment conflict",
            extra={"seat_id": str(seat_id) if seat_id else None, "shift_id": str(shift_id), "member_id": str(member_id)},
        )
        raise Conflict(f"Seat {seat_label} is already assigned for shift {shift_title}") from e
    return assignment


# 회원이 보유한 모든 좌석 배정 삭제 (수정/갱신 전 재배정, 비활성화, 삭제 시 사용)
def release_all_assignments(db: Session, member: Member) -> int:
    result = db.execute(
        delete(SeatAssignment).where(SeatAssignment.member_id == member.id)
    )
    return result.rowcount or 0


"""
사물함 배정

- 회원이 다른 사물함을 갖고 있었다면 먼저 해제
- 조건부 UPDATE (member_id IS NULL 또는 본인) 로 원자적으로 점유
- 갱신된 행이 없으면 다른 회원이 점유 중 → Conflict

"""

def reserve_locker(db: Session, locker: Locker, member: Member) -> None:
    if member.locker_id is not None and member.locker_id != locker.id:
        release_locker(db, member)

    result = db.execute(
        update(Locker)
        .where(Locker.id == locker.id)
        .where(or_(Locker.member_id.is_(None), Locker.member_id == member.id))
        .values(is_assigned=True, member_id=member.id)
        .execution_options(synchronize_session="fetch")
    )
    if not result.rowcount:
        raise Conflict(f"Locker {locker.locker_number} is already assigned to another member")

    member.locker_id = locker.id


# 회원이 보유한 사물함이 있으면 배정 해제 (없으면 아무 일도 하지 않음)
def release_locker(db: Session, member: Member) -> None:
    db.execute(
        update(Locker)
        .where(Locker.member_id == member.id)
        .values(is_assigned=False, member_id=None)
        .execution_options(synchronize_session="fetch")
    )
    member.locker_id = None
