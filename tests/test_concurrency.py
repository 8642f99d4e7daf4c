"""

자원 배타성 테스트.
- 서로 다른 세션(동시 요청을 흉내)에서 같은 좌석+시간대 / 사물함을 요청하면
  DB 제약이 한쪽만 통과시키고 다른 쪽은 Conflict 로 전체 롤백되는지,
  사물함 is_assigned 와 member_id 가 항상 함께 움직이는지 확인한다.
- 행 잠금 대기가 필요한 교차 실행 테스트는 PostgreSQL 에서만 실행한다.

"""

import threading
from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from app.core.errors import Conflict
from app.models.history import MembershipHistory
from app.models.member import Member, SeatAssignment
from app.models.resource import Locker, Seat, Shift
from app.schemas.member import MemberWriteRequest
from app.services import members as service
from app.services import registry
from app.services.payments import apply_payment
from tests.helpers import create_admin_in_db, ctx_for, history_rows, member_payload, seed_reference


def _require_postgres(db):
    if db.get_bind().dialect.name != "postgresql":
        pytest.skip("row lock waits need PostgreSQL (set TEST_DATABASE_URL)")


def _assert_locker_invariant(db):
    db.expire_all()
    held = {m.locker_id: m.id for m in db.scalars(select(Member).where(Member.locker_id.is_not(None)))}
    for locker in db.scalars(select(Locker)):
        assert locker.is_assigned == (locker.member_id is not None)
        if locker.is_assigned:
            assert held.get(locker.id) == locker.member_id
        else:
            assert locker.id not in held


def test_two_sessions_same_seat_and_shift(db_session, session_factory):
    ctx = ctx_for(create_admin_in_db(db_session))
    ref = seed_reference(db_session)

    s1 = session_factory()
    s2 = session_factory()
    try:
        service.enroll_member(s1, ctx, MemberWriteRequest(**member_payload(ref, name="One")))
        loser = member_payload(ref, name="Two")
        with pytest.raises(Conflict):
            service.enroll_member(s2, ctx, MemberWriteRequest(**loser))
    finally:
        s1.close()
        s2.close()

    db_session.expire_all()
    assignments = db_session.scalars(select(SeatAssignment)).all()
    assert len(assignments) == 1
    assert db_session.scalar(select(Member).where(Member.phone == loser["phone"])) is None


def test_two_sessions_same_locker(db_session, session_factory):
    ctx = ctx_for(create_admin_in_db(db_session))
    ref = seed_reference(db_session)
    locker_id = str(ref["locker_1_id"])

    s1 = session_factory()
    s2 = session_factory()
    try:
        winner = service.enroll_member(
            s1, ctx, MemberWriteRequest(**member_payload(ref, locker_id=locker_id))
        )
        winner_id = winner.id
        with pytest.raises(Conflict):
            service.enroll_member(
                s2,
                ctx,
                MemberWriteRequest(**member_payload(ref, seat_id=str(ref["seat_b_id"]), locker_id=locker_id)),
            )
    finally:
        s1.close()
        s2.close()

    db_session.expire_all()
    assert db_session.get(Locker, ref["locker_1_id"]).member_id == winner_id
    _assert_locker_invariant(db_session)


def test_locker_flag_tracks_holder_through_lifecycle(db_session):
    ctx = ctx_for(create_admin_in_db(db_session))
    ref = seed_reference(db_session)

    member = service.enroll_member(
        db_session, ctx, MemberWriteRequest(**member_payload(ref, locker_id=str(ref["locker_1_id"])))
    )
    member_id = member.id
    _assert_locker_invariant(db_session)

    service.edit_member(
        db_session, ctx, member_id, MemberWriteRequest(**member_payload(ref, locker_id=str(ref["locker_2_id"])))
    )
    _assert_locker_invariant(db_session)

    service.set_member_active(db_session, ctx, member_id, False)
    _assert_locker_invariant(db_session)

    service.delete_member_permanently(db_session, ctx, member_id)
    _assert_locker_invariant(db_session)
    assert db_session.scalars(select(Locker).where(Locker.is_assigned.is_(True))).all() == []


def test_interleaved_enrolls_on_same_seat_and_shift(db_session, session_factory):
    _require_postgres(db_session)
    ctx = ctx_for(create_admin_in_db(db_session))
    ref = seed_reference(db_session)

    first = session_factory()
    second = session_factory()
    outcome = {}

    def enroll_second():
        try:
            service.enroll_member(second, ctx, MemberWriteRequest(**member_payload(ref, name="Late")))
            outcome["result"] = "enrolled"
        except Conflict as e:
            outcome["result"] = e

    try:
        # first 는 좌석 배정까지 flush 한 뒤 commit 을 미룬다
        today = date.today()
        holder = Member(
            name="Early",
            phone="9000000001",
            branch_id=ref["branch_id"],
            membership_start=today,
            membership_end=today + timedelta(days=30),
        )
        first.add(holder)
        first.flush()
        registry.reserve_assignment(
            first, first.get(Seat, ref["seat_a_id"]), first.get(Shift, ref["morning_id"]), holder
        )
        holder_id = holder.id

        worker = threading.Thread(target=enroll_second)
        worker.start()
        worker.join(timeout=1.0)
        # second 는 first 의 미확정 유니크 인덱스 항목 때문에 대기 중
        assert worker.is_alive()

        first.commit()
        worker.join(timeout=10)
        assert not worker.is_alive()
    finally:
        first.close()
        second.close()

    assert isinstance(outcome.get("result"), Conflict)

    db_session.expire_all()
    assignments = db_session.scalars(select(SeatAssignment)).all()
    assert [a.member_id for a in assignments] == [holder_id]
    assert db_session.scalar(select(Member).where(Member.name == "Late")) is None


def test_payment_waits_on_member_row_locked_by_edit(db_session, session_factory):
    _require_postgres(db_session)
    ctx = ctx_for(create_admin_in_db(db_session))
    ref = seed_reference(db_session)
    member_id = service.enroll_member(db_session, ctx, MemberWriteRequest(**member_payload(ref))).id
    history_id = history_rows(db_session, member_id)[0].id

    editor = session_factory()
    payer = session_factory()
    outcome = {}

    def pay():
        try:
            apply_payment(payer, ctx, history_id=history_id, amount=100, channel="cash")
            outcome["result"] = "paid"
        except Exception as e:
            outcome["result"] = e

    try:
        # 수정과 같은 순서: 회원 행 잠금 → 최근 이력 행 갱신
        editor.scalar(select(Member).where(Member.id == member_id).with_for_update())

        worker = threading.Thread(target=pay)
        worker.start()
        worker.join(timeout=1.0)
        assert worker.is_alive()

        row = editor.get(MembershipHistory, history_id)
        row.remark = "corrected"
        editor.commit()

        worker.join(timeout=10)
        assert not worker.is_alive()
    finally:
        editor.close()
        payer.close()

    assert outcome.get("result") == "paid"

    db_session.expire_all()
    row = db_session.get(MembershipHistory, history_id)
    assert row.remark == "corrected"
    assert row.due_amount == Decimal("500.00")
    assert db_session.get(Member, member_id).due_amount == Decimal("500.00")
