"""

신규 가입(Enroll) 통합 테스트.
- 요금 계산(paid / due), 첫 이력 행 생성, 좌석+시간대 / 사물함 충돌,
  입력 검증(400), 전화번호 중복(409), 권한(403)까지 검증한다.

"""

import uuid
from datetime import date, timedelta

from sqlalchemy import select

from app.models.action_log import ActionLog, LedgerAction
from app.models.member import Member, SeatAssignment
from app.models.resource import Locker
from app.models.user import Permission
from tests.helpers import auth_header, history_rows, member_payload, seed_reference, setup_admin, setup_staff


def test_enroll_computes_paid_and_due_and_writes_first_period(client, db_session):
    admin = setup_admin(client, db_session)
    ref = seed_reference(db_session)

    r = client.post(
        "/members",
        headers=auth_header(admin["token"]),
        json=member_payload(ref, total_fee=1000, discount=100, cash=300, online=200, locker_id=str(ref["locker_1_id"])),
    )
    assert r.status_code == 201, r.text
    body = r.json()["data"]
    assert body["amount_paid"] == 500
    assert body["due_amount"] == 400
    assert body["status"] == "active"
    assert body["locker_id"] == str(ref["locker_1_id"])

    rows = history_rows(db_session, body["id"])
    assert len(rows) == 1
    assert rows[0].period_no == 1
    assert rows[0].seat_id == ref["seat_a_id"]
    assert rows[0].shift_id == ref["morning_id"]
    assert rows[0].locker_id == ref["locker_1_id"]
    assert float(rows[0].due_amount) == 400

    locker = db_session.get(Locker, ref["locker_1_id"])
    assert locker.is_assigned is True
    assert str(locker.member_id) == body["id"]

    log = db_session.scalar(select(ActionLog).where(ActionLog.target_member_id == rows[0].member_id))
    assert log.action == LedgerAction.ENROLL
    assert log.actor_id == admin["user"].id


def test_enroll_with_multiple_shifts_assigns_each(client, db_session):
    admin = setup_admin(client, db_session)
    ref = seed_reference(db_session)

    r = client.post(
        "/members",
        headers=auth_header(admin["token"]),
        json=member_payload(ref, shift_ids=[str(ref["morning_id"]), str(ref["evening_id"]), str(ref["morning_id"])]),
    )
    assert r.status_code == 201, r.text

    member_id = uuid.UUID(r.json()["data"]["id"])
    assignments = db_session.scalars(select(SeatAssignment).where(SeatAssignment.member_id == member_id)).all()
    # 중복된 shift id 는 한 번만 배정
    assert sorted(a.shift_id for a in assignments) == sorted([ref["morning_id"], ref["evening_id"]])


def test_enroll_conflict_on_taken_seat_and_shift(client, db_session):
    admin = setup_admin(client, db_session)
    ref = seed_reference(db_session)
    headers = auth_header(admin["token"])

    first = client.post("/members", headers=headers, json=member_payload(ref, name="First"))
    assert first.status_code == 201, first.text

    second_body = member_payload(ref, name="Second")
    second = client.post("/members", headers=headers, json=second_body)
    assert second.status_code == 409
    assert second.json()["error"] == "conflict"
    assert "already assigned" in second.json()["detail"]

    # 전체 롤백: 두 번째 회원 헤드 행도 남지 않음
    db_session.expire_all()
    assert db_session.scalar(select(Member).where(Member.phone == second_body["phone"])) is None

    # 같은 좌석이라도 다른 시간대면 허용
    other_shift = client.post(
        "/members", headers=headers, json=member_payload(ref, name="Third", shift_ids=[str(ref["evening_id"])])
    )
    assert other_shift.status_code == 201, other_shift.text


def test_enroll_conflict_on_taken_locker(client, db_session):
    admin = setup_admin(client, db_session)
    ref = seed_reference(db_session)
    headers = auth_header(admin["token"])

    first = client.post(
        "/members", headers=headers, json=member_payload(ref, locker_id=str(ref["locker_1_id"]))
    )
    assert first.status_code == 201, first.text

    second = client.post(
        "/members",
        headers=headers,
        json=member_payload(ref, seat_id=str(ref["seat_b_id"]), locker_id=str(ref["locker_1_id"])),
    )
    assert second.status_code == 409
    assert second.json()["detail"] == "Locker L1 is already assigned to another member"

    db_session.expire_all()
    locker = db_session.get(Locker, ref["locker_1_id"])
    assert str(locker.member_id) == first.json()["data"]["id"]


def test_enroll_seat_conflict_with_free_locker_releases_locker(client, db_session):
    admin = setup_admin(client, db_session)
    ref = seed_reference(db_session)
    headers = auth_header(admin["token"])

    first = client.post("/members", headers=headers, json=member_payload(ref))
    assert first.status_code == 201, first.text

    # 사물함 점유는 성공했지만 좌석+시간대가 이미 점유 → 전체 롤백
    second_body = member_payload(ref, locker_id=str(ref["locker_2_id"]))
    second = client.post("/members", headers=headers, json=second_body)
    assert second.status_code == 409, second.text
    assert second.json() == {"detail": "Seat A1 is already assigned for shift Morning", "error": "conflict"}

    db_session.expire_all()
    locker = db_session.get(Locker, ref["locker_2_id"])
    assert locker.is_assigned is False and locker.member_id is None
    assert db_session.scalar(select(Member).where(Member.phone == second_body["phone"])) is None
    assert len(db_session.scalars(select(SeatAssignment)).all()) == 1


def test_enroll_validation_errors(client, db_session):
    admin = setup_admin(client, db_session)
    ref = seed_reference(db_session)
    headers = auth_header(admin["token"])

    missing = client.post("/members", headers=headers, json=member_payload(ref, name=""))
    assert missing.status_code == 400
    assert missing.json()["error"] == "validation_error"

    negative = client.post("/members", headers=headers, json=member_payload(ref, total_fee=-10))
    assert negative.status_code == 400
    assert negative.json()["detail"] == "Total fee must be a valid non-negative number"

    today = date.today()
    reversed_dates = client.post(
        "/members",
        headers=headers,
        json=member_payload(
            ref,
            membership_start=today.isoformat(),
            membership_end=(today - timedelta(days=1)).isoformat(),
        ),
    )
    assert reversed_dates.status_code == 400

    seat_without_shift = client.post("/members", headers=headers, json=member_payload(ref, shift_ids=[]))
    assert seat_without_shift.status_code == 400
    assert seat_without_shift.json()["detail"] == "A seat requires at least one shift"

    unknown_branch = client.post(
        "/members", headers=headers, json=member_payload(ref, branch_id="00000000-0000-0000-0000-000000000001")
    )
    assert unknown_branch.status_code == 400

    db_session.expire_all()
    assert db_session.scalars(select(Member)).all() == []


def test_enroll_duplicate_phone(client, db_session):
    admin = setup_admin(client, db_session)
    ref = seed_reference(db_session)
    headers = auth_header(admin["token"])

    first = client.post("/members", headers=headers, json=member_payload(ref, phone="9800000001"))
    assert first.status_code == 201, first.text

    dup = client.post(
        "/members",
        headers=headers,
        json=member_payload(ref, phone="9800000001", seat_id=str(ref["seat_b_id"])),
    )
    assert dup.status_code == 409
    assert dup.json()["detail"] == "A member with this phone number already exists."


def test_enroll_requires_manage_members(client, db_session):
    ref = seed_reference(db_session)

    viewer = setup_staff(client, db_session, permissions=[Permission.VIEW_COLLECTIONS])
    denied = client.post("/members", headers=auth_header(viewer["token"]), json=member_payload(ref))
    assert denied.status_code == 403
    assert denied.json()["error"] == "permission_denied"

    manager = setup_staff(client, db_session, permissions=[Permission.MANAGE_MEMBERS])
    ok = client.post("/members", headers=auth_header(manager["token"]), json=member_payload(ref))
    assert ok.status_code == 201, ok.text


def test_public_register(client, db_session):
    ref = seed_reference(db_session)

    r = client.post(
        "/members/public/register",
        json={"name": "Walk In", "phone": "9811111111", "branch_id": str(ref["branch_id"])},
    )
    assert r.status_code == 201, r.text
    body = r.json()["data"]
    assert body["membership_start"] == date.today().isoformat()
    assert body["membership_end"] == (date.today() + timedelta(days=365)).isoformat()
    assert body["total_fee"] == 0
    assert body["due_amount"] == 0
    assert len(history_rows(db_session, body["id"])) == 1

    dup = client.post(
        "/members/public/register",
        json={"name": "Again", "phone": "9811111111", "branch_id": str(ref["branch_id"])},
    )
    assert dup.status_code == 409

    missing = client.post("/members/public/register", json={"name": "No Branch", "phone": "9822222222"})
    assert missing.status_code == 400
    assert missing.json()["detail"] == "Name, phone, and branch are required fields"
