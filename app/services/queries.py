"""
services/queries.py

회원 원장 조회(Read Path) 로직 모음.

이 파일은 쓰기를 하지 않는 조회 전용 함수들을 모아 둔다.
회원 상태(active / expired)는 저장된 값이 아니라
항상 조회 시점의 membership_end 와 오늘 날짜 비교로 계산한다.

주요 기능:
- 활성 / 만료 / 만료 임박 / 비활성 회원 목록
- 시간대(shift)별 명단 (검색, 상태 필터)
- 회원 상세 (현재 좌석 배정, 사물함 번호 포함)
- 이력(청구 기간) 목록, 월별 / 지점별 수납 현황과 합계
- 사물함 배정 현황, 시간대별 회원 수

"""

import re
import uuid
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import Select, extract, func, or_, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFound, ValidationError
from app.models.history import MembershipHistory, Payment
from app.models.member import Member, SeatAssignment
from app.models.resource import Branch, Locker, Seat, Shift

_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")

STATUS_FILTERS = ("all", "active", "expired")


def _today(today: date | None) -> date:
    return today or date.today()


def _with_branch(stmt: Select, branch_id: uuid.UUID | None) -> Select:
    if branch_id is not None:
        stmt = stmt.where(Member.branch_id == branch_id)
    return stmt


def _locker_numbers(db: Session, members: list[Member]) -> dict:
    locker_ids = [m.locker_id for m in members if m.locker_id]
    if not locker_ids:
        return {}
    rows = db.execute(select(Locker.id, Locker.locker_number).where(Locker.id.in_(locker_ids))).all()
    return {r.id: r.locker_number for r in rows}


def _latest_seat_numbers(db: Session, member_ids: list) -> dict:
    if not member_ids:
        return {}
    rows = db.execute(
        select(SeatAssignment.member_id, Seat.seat_number)
        .join(Seat, SeatAssignment.seat_id == Seat.id)
        .where(SeatAssignment.member_id.in_(member_ids))
        .order_by(SeatAssignment.created_at)
    ).all()
    # 나중 배정이 앞선 값을 덮어쓰도록 오래된 순으로 순회
    return {r.member_id: r.seat_number for r in rows}


"""
회원 목록 행 구성

- member        : Member ORM 객체
- status        : 조회 시점 기준 active / expired
- seat_number   : 가장 최근 좌석 번호 (없으면 None)
- locker_number : 보유 사물함 번호 (없으면 None)

"""

def _rows(db: Session, members: list[Member], today: date) -> list[dict]:
    lockers = _locker_numbers(db, members)
    seats = _latest_seat_numbers(db, [m.id for m in members])
    return [
        {
            "member": m,
            "status": m.status(today),
            "seat_number": seats.get(m.id),
            "locker_number": lockers.get(m.locker_id),
        }
        for m in members
    ]


def list_members(db: Session, *, branch_id: uuid.UUID | None = None, today: date | None = None) -> list[dict]:
    stmt = _with_branch(select(Member), branch_id).order_by(Member.name)
    return _rows(db, list(db.scalars(stmt).all()), _today(today))


def active_members(db: Session, *, branch_id: uuid.UUID | None = None, today: date | None = None) -> list[dict]:
    today = _today(today)
    stmt = _with_branch(select(Member).where(Member.membership_end >= today), branch_id).order_by(Member.name)
    return _rows(db, list(db.scalars(stmt).all()), today)


def expired_members(db: Session, *, branch_id: uuid.UUID | None = None, today: date | None = None) -> list[dict]:
    today = _today(today)
    stmt = _with_branch(select(Member).where(Member.membership_end < today), branch_id).order_by(Member.name)
    return _rows(db, list(db.scalars(stmt).all()), today)


def expiring_soon(
    db: Session,
    *,
    branch_id: uuid.UUID | None = None,
    days: int | None = None,
    today: date | None = None,
) -> list[dict]:
    today = _today(today)
    window = settings.EXPIRING_SOON_DAYS if days is None else days
    if window < 0:
        raise ValidationError("days must be a non-negative integer")
    stmt = _with_branch(
        select(Member).where(
            Member.membership_end >= today,
            Member.membership_end <= today + timedelta(days=window),
        ),
        branch_id,
    ).order_by(Member.membership_end, Member.name)
    return _rows(db, list(db.scalars(stmt).all()), today)


def inactive_members(db: Session, *, branch_id: uuid.UUID | None = None, today: date | None = None) -> list[dict]:
    stmt = _with_branch(select(Member).where(Member.is_active.is_(False)), branch_id).order_by(Member.name)
    return _rows(db, list(db.scalars(stmt).all()), _today(today))


"""
시간대별 명단 (RosterForShift)

- 해당 시간대에 배정된 회원만 조회
- search : 이름 / 전화번호 부분 일치 (대소문자 무시)
- status : all / active / expired

"""

def roster_for_shift(
    db: Session,
    shift_id: uuid.UUID,
    *,
    branch_id: uuid.UUID | None = None,
    search: str | None = None,
    status: str = "all",
    today: date | None = None,
) -> list[dict]:
    today = _today(today)
    if status not in STATUS_FILTERS:
        raise ValidationError("status must be one of: all, active, expired")
    if db.get(Shift, shift_id) is None:
        raise NotFound("Shift not found")

    stmt = (
        select(Member)
        .join(SeatAssignment, SeatAssignment.member_id == Member.id)
        .where(SeatAssignment.shift_id == shift_id)
    )
    stmt = _with_branch(stmt, branch_id)
    if search:
        pattern = f"%{search.lower()}%"
        stmt = stmt.where(or_(func.lower(Member.name).like(pattern), Member.phone.like(f"%{search}%")))
    if status == "active":
        stmt = stmt.where(Member.membership_end >= today)
    elif status == "expired":
        stmt = stmt.where(Member.membership_end < today)

    members = list(db.scalars(stmt.order_by(Member.name)).unique().all())
    return _rows(db, members, today)


"""
회원 상세 조회

- 헤드 레코드 + 지점명 + 사물함 번호 + 현재 좌석 배정 목록
- 존재하지 않으면 NotFound

"""

def member_detail(db: Session, member_id: uuid.UUID, *, today: date | None = None) -> dict:
    member = db.get(Member, member_id)
    if member is None:
        raise NotFound("Member not found")

    branch = db.get(Branch, member.branch_id)
    locker = db.get(Locker, member.locker_id) if member.locker_id else None
    rows = db.execute(
        select(SeatAssignment.seat_id, SeatAssignment.shift_id, Seat.seat_number, Shift.title)
        .outerjoin(Seat, SeatAssignment.seat_id == Seat.id)
        .join(Shift, SeatAssignment.shift_id == Shift.id)
        .where(SeatAssignment.member_id == member.id)
        .order_by(SeatAssignment.created_at)
    ).all()

    return {
        "member": member,
        "status": member.status(_today(today)),
        "branch_name": branch.name if branch else None,
        "locker_number": locker.locker_number if locker else None,
        "assignments": [
            {"seat_id": r.seat_id, "shift_id": r.shift_id, "seat_number": r.seat_number, "shift_title": r.title}
            for r in rows
        ],
    }


def member_history(db: Session, member_id: uuid.UUID) -> list[MembershipHistory]:
    if db.get(Member, member_id) is None:
        raise NotFound("Member not found")
    return list(
        db.scalars(
            select(MembershipHistory)
            .where(MembershipHistory.member_id == member_id)
            .order_by(MembershipHistory.period_no)
        ).all()
    )


"""
수납(Collection) 조회

- month : 'YYYY-MM' 형식, 이력 행의 changed_at 기준 필터
- branch_id : 지점 필터
- 형식이 잘못되면 ValidationError

"""

def validate_month(month: str) -> tuple[int, int]:
    if not _MONTH_RE.match(month):
        raise ValidationError("Invalid month format. Use YYYY-MM")
    year, mon = (int(part) for part in month.split("-"))
    if mon < 1 or mon > 12:
        raise ValidationError("month must be between 01 and 12")
    return year, mon


def _collection_filters(stmt: Select, month: str | None, branch_id: uuid.UUID | None) -> Select:
    if month:
        year, mon = validate_month(month)
        stmt = stmt.where(
            extract("year", MembershipHistory.changed_at) == year,
            extract("month", MembershipHistory.changed_at) == mon,
        )
    if branch_id is not None:
        stmt = stmt.where(MembershipHistory.branch_id == branch_id)
    return stmt


def collections(db: Session, *, month: str | None = None, branch_id: uuid.UUID | None = None) -> list[dict]:
    stmt = (
        select(MembershipHistory, Shift.title, Branch.name)
        .outerjoin(Shift, MembershipHistory.shift_id == Shift.id)
        .outerjoin(Branch, MembershipHistory.branch_id == Branch.id)
    )
    stmt = _collection_filters(stmt, month, branch_id).order_by(MembershipHistory.name, MembershipHistory.period_no)
    return [
        {"history": h, "shift_title": shift_title, "branch_name": branch_name}
        for h, shift_title, branch_name in db.execute(stmt).all()
    ]


def collection_stats(db: Session, *, month: str | None = None, branch_id: uuid.UUID | None = None) -> dict:
    stmt = select(
        func.coalesce(func.sum(MembershipHistory.amount_paid), 0),
        func.coalesce(func.sum(MembershipHistory.due_amount), 0),
        func.coalesce(func.sum(MembershipHistory.cash), 0),
        func.coalesce(func.sum(MembershipHistory.online), 0),
        func.coalesce(func.sum(MembershipHistory.security_money), 0),
    )
    row = db.execute(_collection_filters(stmt, month, branch_id)).one()
    keys = ("total_paid", "total_due", "total_cash", "total_online", "total_security_money")
    return {k: Decimal(str(v or 0)).quantize(Decimal("0.01")) for k, v in zip(keys, row)}


def payments_for_history(db: Session, history_id: uuid.UUID) -> list[Payment]:
    if db.get(MembershipHistory, history_id) is None:
        raise NotFound("History record not found")
    return list(
        db.scalars(
            select(Payment).where(Payment.history_id == history_id).order_by(Payment.created_at)
        ).all()
    )


def locker_board(db: Session, *, branch_id: uuid.UUID | None = None) -> list[dict]:
    stmt = (
        select(Locker, Member.name, Branch.name)
        .outerjoin(Member, Locker.member_id == Member.id)
        .join(Branch, Locker.branch_id == Branch.id)
    )
    if branch_id is not None:
        stmt = stmt.where(Locker.branch_id == branch_id)
    stmt = stmt.order_by(Branch.name, Locker.locker_number)
    return [
        {"locker": locker, "member_name": member_name, "branch_name": branch_name}
        for locker, member_name, branch_name in db.execute(stmt).all()
    ]


def shifts_with_member_counts(db: Session) -> list[dict]:
    stmt = (
        select(Shift, func.count(SeatAssignment.member_id.distinct()))
        .outerjoin(SeatAssignment, SeatAssignment.shift_id == Shift.id)
        .group_by(Shift.id)
        .order_by(Shift.title)
    )
    return [{"shift": shift, "member_count": count} for shift, count in db.execute(stmt).all()]
