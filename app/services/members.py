"""
services/members.py

회원 라이프사이클(Lifecycle Orchestrator) 비즈니스 로직 모음.

이 파일은 요금 계산, 좌석·사물함 배정, 헤드 레코드, 이력 기록을 조합하여
다섯 가지 원자적 연산을 제공한다.

- enroll_member             : 신규 가입 (헤드 생성 + 첫 이력 행 추가)
- edit_member               : 현재 기간 정정 (가장 최근 이력 행 덮어쓰기)
- renew_membership          : 새 기간 시작 (이력 행 추가, 이전 행은 보존)
- set_member_active         : 비활성화 / 재활성화 (비활성화 시 자원 반납)
- delete_member_permanently : 영구 삭제 (배정·사물함·이력·납부 기록까지 모두 제거)

그 외 공개 가입(register_public_member)을 지원한다.

설계 원칙:
- 모든 입력 검증은 쓰기 전에 끝낸다 (ValidationError)
- 자원 충돌은 DB 제약이 판정하고 Conflict 로 전체 롤백
- 호출자 권한은 AuthContext 로 명시적으로 전달받는다
- 트랜잭션 경계는 @atomic 하나 = 연산 하나

관련 파일:
- app.services.billing   : paid / due 계산
- app.services.registry  : 좌석 / 사물함 배정
- app.services.history   : 이력 append / overwrite
- app.db.transaction     : atomic

"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import Conflict, NotFound, ValidationError
from app.core.permissions import AuthContext
from app.db.transaction import atomic
from app.models.action_log import LedgerAction
from app.models.history import MembershipHistory, Payment
from app.models.member import Member
from app.models.resource import Branch, Locker, Seat, Shift
from app.models.user import Permission
from app.schemas.member import MemberWriteRequest, PublicRegisterRequest
from app.services import billing, history, registry
from app.services.action_log import write_action_log
from app.services.history import HistoryWrite

logger = logging.getLogger(__name__)

PHONE_TAKEN = "A member with this phone number already exists."


@dataclass
class _Validated:
    """검증·정규화가 끝난 요청 값."""

    name: str
    phone: str
    branch: Branch
    membership_start: date
    membership_end: date
    total_fee: Decimal
    discount: Decimal
    cash: Decimal
    online: Decimal
    security_money: Decimal
    amount_paid: Decimal
    due_amount: Decimal
    seat: Seat | None
    shifts: list[Shift] = field(default_factory=list)
    locker: Locker | None = None
    extra: dict = field(default_factory=dict)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


"""
요청 값 검증

- 필수: name, phone, branch_id, membership_start, membership_end
- 금액(fee / discount / cash / online / security_money)은 0 이상
- 존재하지 않는 지점 / 좌석 / 시간대 / 사물함 참조는 잘못된 입력으로 처리
- 좌석만 있고 시간대가 없으면 거절, 시간대만 있는 경우는 허용

"""

def _validate(db: Session, data: MemberWriteRequest) -> _Validated:
    name = _clean(data.name)
    phone = _clean(data.phone)
    if not name or not phone or not data.branch_id or not data.membership_start or not data.membership_end:
        raise ValidationError(
            "Required fields missing (name, phone, branch_id, membership_start, membership_end)"
        )
    if data.membership_end < data.membership_start:
        raise ValidationError("membership_end must not be earlier than membership_start")

    total_fee = billing.to_amount(data.total_fee, "Total fee")
    discount = billing.to_amount(data.discount, "Discount")
    cash = billing.to_amount(data.cash, "Cash")
    online = billing.to_amount(data.online, "Online payment")
    security_money = billing.to_amount(data.security_money, "Security money")

    paid = billing.paid(cash, online)
    due = billing.due(total_fee, discount, paid)

    branch = db.get(Branch, data.branch_id)
    if branch is None:
        raise ValidationError(f"Branch with ID {data.branch_id} does not exist")

    seat = None
    if data.seat_id is not None:
        seat = db.get(Seat, data.seat_id)
        if seat is None:
            raise ValidationError(f"Seat with ID {data.seat_id} does not exist")

    shift_ids = list(dict.fromkeys(data.shift_ids or []))
    if seat is not None and not shift_ids:
        raise ValidationError("A seat requires at least one shift")

    shifts = []
    for shift_id in shift_ids:
        shift = db.get(Shift, shift_id)
        if shift is None:
            raise ValidationError(f"Shift with ID {shift_id} does not exist")
        shifts.append(shift)

    locker = None
    if data.locker_id is not None:
        locker = db.get(Locker, data.locker_id)
        if locker is None:
            raise ValidationError(f"Locker with ID {data.locker_id} does not exist")

    return _Validated(
        name=name,
        phone=phone,
        branch=branch,
        membership_start=data.membership_start,
        membership_end=data.membership_end,
        total_fee=total_fee,
        discount=discount,
        cash=cash,
        online=online,
        security_money=security_money,
        amount_paid=paid,
        due_amount=due,
        seat=seat,
        shifts=shifts,
        locker=locker,
        extra={
            "email": _clean(data.email),
            "address": _clean(data.address),
            "father_name": _clean(data.father_name),
            "registration_number": _clean(data.registration_number),
            "id_number": _clean(data.id_number),
            "remark": _clean(data.remark),
        },
    )


def _apply_head(member: Member, v: _Validated) -> None:
    member.name = v.name
    member.phone = v.phone
    member.branch_id = v.branch.id
    member.membership_start = v.membership_start
    member.membership_end = v.membership_end
    member.total_fee = v.total_fee
    member.discount = v.discount
    member.cash = v.cash
    member.online = v.online
    member.amount_paid = v.amount_paid
    member.due_amount = v.due_amount
    member.security_money = v.security_money
    for key, value in v.extra.items():
        setattr(member, key, value)


def _ensure_phone_free(db: Session, phone: str, member_id: uuid.UUID | None = None) -> None:
    stmt = select(Member.id).where(Member.phone == phone)
    if member_id is not None:
        stmt = stmt.where(Member.id != member_id)
    if db.scalar(stmt) is not None:
        raise Conflict(PHONE_TAKEN)


# 유니크 제약(phone)이 최종 판정. 사전 조회와 쓰기 사이의 경쟁도 Conflict 로 처리
def _flush_head(db: Session) -> None:
    try:
        db.flush()
    except IntegrityError as e:
        raise Conflict(PHONE_TAKEN) from e


"""
좌석 / 사물함 재배정

- 사물함: 요청에 있으면 점유(이전 사물함은 해제), 없으면 보유 사물함 해제
- 좌석: 보유 배정을 모두 해제한 뒤 요청한 시간대마다 다시 배정
- 반환값은 이력 스냅샷에 남길 (seat_id, 첫 번째 shift_id)

"""

def _assign_resources(db: Session, member: Member, v: _Validated):
    if v.locker is not None:
        registry.reserve_locker(db, v.locker, member)
    elif member.locker_id is not None:
        registry.release_locker(db, member)

    registry.release_all_assignments(db, member)
    for shift in v.shifts:
        registry.reserve_assignment(db, v.seat, shift, member)

    first_shift_id = v.shifts[0].id if v.shifts else None
    seat_id = v.seat.id if (v.seat is not None and v.shifts) else None
    return seat_id, first_shift_id


def _get_member(db: Session, member_id: uuid.UUID, *, lock: bool = False) -> Member:
    stmt = select(Member).where(Member.id == member_id)
    if lock:
        stmt = stmt.with_for_update()
    member = db.scalar(stmt)
    if member is None:
        raise NotFound("Member not found")
    return member


def _write_period(db: Session, member: Member, kind: HistoryWrite, seat_id, shift_id) -> MembershipHistory:
    db.flush()
    period = history.snapshot(member, seat_id=seat_id, shift_id=shift_id)
    return history.record_period(db, member, kind, period)


"""
신규 가입 (Enroll)

- 권한: manage_members
- 헤드 행 INSERT → 사물함 / 좌석 배정 → 첫 이력 행 추가
- 전화번호 중복, 좌석·사물함 점유 시 Conflict

"""

@atomic
def enroll_member(db: Session, ctx: AuthContext, data: MemberWriteRequest) -> Member:
    ctx.require(Permission.MANAGE_MEMBERS)
    v = _validate(db, data)
    _ensure_phone_free(db, v.phone)

    member = Member(id=uuid.uuid4(), is_active=True)
    _apply_head(member, v)
    db.add(member)
    _flush_head(db)

    seat_id, shift_id = _assign_resources(db, member, v)
    _write_period(db, member, HistoryWrite.NEW_PERIOD, seat_id, shift_id)

    write_action_log(db, actor_id=ctx.user_id, action=LedgerAction.ENROLL, target_member_id=member.id)
    logger.info("member enrolled", extra={"member_id": str(member.id), "actor_id": str(ctx.user_id)})
    return member


"""
현재 기간 정정 (Edit)

- 권한: 직원 이상
- 가입과 같은 검증 / 재배정을 수행한 뒤 헤드를 갱신
- 가장 최근 이력 행을 제자리에서 덮어씀 (이력 행 수는 변하지 않음)

"""

@atomic
def edit_member(db: Session, ctx: AuthContext, member_id: uuid.UUID, data: MemberWriteRequest) -> Member:
    ctx.require_staff()
    v = _validate(db, data)
    member = _get_member(db, member_id, lock=True)
    _ensure_phone_free(db, v.phone, member.id)

    seat_id, shift_id = _assign_resources(db, member, v)
    _apply_head(member, v)
    _flush_head(db)
    _write_period(db, member, HistoryWrite.CORRECTION, seat_id, shift_id)

    write_action_log(db, actor_id=ctx.user_id, action=LedgerAction.EDIT, target_member_id=member.id)
    logger.info("member edited", extra={"member_id": str(member.id), "actor_id": str(ctx.user_id)})
    return member


"""
멤버십 갱신 (Renew)

- 권한: 직원 이상
- 수정과 같은 검증 / 재배정, 헤드는 새 기간 값으로 갱신
- 새 이력 행을 추가하며 이전 기간 행은 그대로 보존

"""

@atomic
def renew_membership(db: Session, ctx: AuthContext, member_id: uuid.UUID, data: MemberWriteRequest) -> Member:
    ctx.require_staff()
    v = _validate(db, data)
    member = _get_member(db, member_id, lock=True)
    _ensure_phone_free(db, v.phone, member.id)

    seat_id, shift_id = _assign_resources(db, member, v)
    _apply_head(member, v)
    _flush_head(db)
    _write_period(db, member, HistoryWrite.NEW_PERIOD, seat_id, shift_id)

    write_action_log(db, actor_id=ctx.user_id, action=LedgerAction.RENEW, target_member_id=member.id)
    logger.info("membership renewed", extra={"member_id": str(member.id), "actor_id": str(ctx.user_id)})
    return member


"""
활성 상태 변경 (Deactivate / Reactivate)

- 권한: 직원 이상
- False 로 바꾸면 모든 좌석 배정과 사물함을 반납
- 금액 필드와 이력 행은 변경하지 않음

"""

@atomic
def set_member_active(db: Session, ctx: AuthContext, member_id: uuid.UUID, is_active: bool) -> Member:
    ctx.require_staff()
    if not isinstance(is_active, bool):
        raise ValidationError("is_active must be a boolean value.")

    member = _get_member(db, member_id, lock=True)
    member.is_active = is_active
    if not is_active:
        registry.release_all_assignments(db, member)
        registry.release_locker(db, member)
    db.flush()

    action = LedgerAction.REACTIVATE if is_active else LedgerAction.DEACTIVATE
    write_action_log(db, actor_id=ctx.user_id, action=action, target_member_id=member.id)
    logger.info(
        "member %s", "reactivated" if is_active else "deactivated",
        extra={"member_id": str(member.id), "actor_id": str(ctx.user_id)},
    )
    return member


"""
영구 삭제 (되돌릴 수 없음)

- 권한: 직원 이상
- 좌석 배정 삭제 → 사물함 해제 → 납부 기록 / 이력 삭제 → 헤드 삭제
- 비활성화(set_member_active)와 구분하기 위해 이름에 permanently 를 명시
- 행위 로그는 FK 가 아니므로 남는다

"""

@atomic
def delete_member_permanently(db: Session, ctx: AuthContext, member_id: uuid.UUID) -> uuid.UUID:
    ctx.require_staff()
    member = _get_member(db, member_id, lock=True)

    registry.release_all_assignments(db, member)
    registry.release_locker(db, member)
    db.flush()

    db.execute(delete(Payment).where(Payment.member_id == member.id))
    db.execute(delete(MembershipHistory).where(MembershipHistory.member_id == member.id))
    db.delete(member)
    db.flush()

    write_action_log(
        db,
        actor_id=ctx.user_id,
        action=LedgerAction.DELETE,
        target_member_id=member_id,
        detail=f"{member.name} ({member.phone})",
    )
    logger.info("member deleted permanently", extra={"member_id": str(member_id), "actor_id": str(ctx.user_id)})
    return member_id


"""
공개 가입 (인증 없음)

- name, phone, branch_id 만 필수
- 시작일 = 오늘, 종료일 = 오늘 + PUBLIC_MEMBERSHIP_DAYS
- 금액 필드는 모두 0, 좌석 / 사물함 배정 없음
- 전화번호가 이미 등록되어 있으면 Conflict

"""

@atomic
def register_public_member(db: Session, data: PublicRegisterRequest, *, today: date | None = None) -> Member:
    today = today or date.today()
    if not _clean(data.name) or not _clean(data.phone) or not data.branch_id:
        raise ValidationError("Name, phone, and branch are required fields")

    request = MemberWriteRequest(
        name=data.name,
        phone=data.phone,
        email=data.email,
        address=data.address,
        father_name=data.father_name,
        registration_number=data.registration_number,
        id_number=data.id_number,
        branch_id=data.branch_id,
        membership_start=today,
        membership_end=today + timedelta(days=settings.PUBLIC_MEMBERSHIP_DAYS),
    )
    v = _validate(db, request)
    _ensure_phone_free(db, v.phone)

    member = Member(id=uuid.uuid4(), is_active=True)
    _apply_head(member, v)
    db.add(member)
    _flush_head(db)
    _write_period(db, member, HistoryWrite.NEW_PERIOD, None, None)

    write_action_log(db, actor_id=None, action=LedgerAction.PUBLIC_REGISTER, target_member_id=member.id)
    logger.info("public registration", extra={"member_id": str(member.id)})
    return member
