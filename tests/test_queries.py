"""

조회(Read Path) 통합 테스트.
- 활성 / 만료 / 만료 임박 목록, 시간대 명단(검색·상태 필터),
  회원 상세 / 이력, 수납 목록·합계와 month 형식 검증,
  사물함 현황 / 시간대별 회원 수를 확인한다.

"""

from datetime import date, datetime, timedelta, timezone

from app.models.user import Permission
from tests.helpers import auth_header, member_payload, seed_reference, setup_admin, setup_staff


def _enroll(client, headers, ref, **overrides) -> dict:
    r = client.post("/members", headers=headers, json=member_payload(ref, **overrides))
    assert r.status_code == 201, r.text
    return r.json()["data"]


def _dates(start_offset: int, end_offset: int) -> dict:
    today = date.today()
    return {
        "membership_start": (today + timedelta(days=start_offset)).isoformat(),
        "membership_end": (today + timedelta(days=end_offset)).isoformat(),
    }


def _names(response) -> list[str]:
    assert response.status_code == 200, response.text
    return sorted(m["name"] for m in response.json()["data"])


def test_active_expired_and_expiring_soon(client, db_session):
    admin = setup_admin(client, db_session)
    ref = seed_reference(db_session)
    headers = auth_header(admin["token"])

    _enroll(client, headers, ref, name="Soon", **_dates(-27, 3))
    _enroll(client, headers, ref, name="Later", shift_ids=[str(ref["evening_id"])], **_dates(-5, 25))
    _enroll(client, headers, ref, name="Gone", seat_id=str(ref["seat_b_id"]), **_dates(-40, -1))
    _enroll(client, headers, ref, name="Today", seat_id=None, shift_ids=[], **_dates(-30, 0))

    assert _names(client.get("/members/active", headers=headers)) == ["Later", "Soon", "Today"]
    assert _names(client.get("/members/expired", headers=headers)) == ["Gone"]
    assert _names(client.get("/members/expiring-soon", headers=headers)) == ["Soon", "Today"]
    assert _names(client.get("/members/expiring-soon?days=30", headers=headers)) == ["Later", "Soon", "Today"]

    negative = client.get("/members/expiring-soon?days=-1", headers=headers)
    assert negative.status_code == 400

    everyone = client.get(f"/members?branch_id={ref['branch_id']}", headers=headers)
    assert everyone.json()["meta"]["count"] == 4
    gone = next(m for m in everyone.json()["data"] if m["name"] == "Gone")
    assert gone["status"] == "expired"
    assert gone["seat_number"] == "A2"


def test_shift_roster_search_and_status(client, db_session):
    admin = setup_admin(client, db_session)
    ref = seed_reference(db_session)
    headers = auth_header(admin["token"])

    _enroll(client, headers, ref, name="Ravi", phone="9700000001", **_dates(-10, 20))
    _enroll(client, headers, ref, name="Meena", phone="9700000002", seat_id=str(ref["seat_b_id"]), **_dates(-40, -2))
    _enroll(client, headers, ref, name="Other", phone="9700000003", shift_ids=[str(ref["evening_id"])])

    url = f"/members/shift/{ref['morning_id']}"
    assert _names(client.get(url, headers=headers)) == ["Meena", "Ravi"]
    assert _names(client.get(f"{url}?status=expired", headers=headers)) == ["Meena"]
    assert _names(client.get(f"{url}?search=rav", headers=headers)) == ["Ravi"]
    assert _names(client.get(f"{url}?search=0000002", headers=headers)) == ["Meena"]

    bad = client.get(f"{url}?status=paused", headers=headers)
    assert bad.status_code == 400


def test_member_detail_and_history(client, db_session):
    admin = setup_admin(client, db_session)
    ref = seed_reference(db_session)
    headers = auth_header(admin["token"])
    member = _enroll(client, headers, ref, locker_id=str(ref["locker_2_id"]))

    detail = client.get(f"/members/{member['id']}", headers=headers)
    assert detail.status_code == 200, detail.text
    body = detail.json()["data"]
    assert body["locker_number"] == "L2"
    assert body["branch_name"].startswith("Main-")
    assert body["assignments"] == [
        {
            "seat_id": str(ref["seat_a_id"]),
            "shift_id": str(ref["morning_id"]),
            "seat_number": "A1",
            "shift_title": "Morning",
        }
    ]

    history = client.get(f"/members/{member['id']}/history", headers=headers)
    assert history.status_code == 200
    assert [h["period_no"] for h in history.json()["data"]] == [1]
    assert history.json()["data"][0]["status"] == "active"


def test_collections_and_stats(client, db_session):
    admin = setup_admin(client, db_session)
    ref = seed_reference(db_session)
    headers = auth_header(admin["token"])
    _enroll(client, headers, ref, total_fee=1000, cash=400, security_money=200)
    _enroll(client, headers, ref, shift_ids=[str(ref["evening_id"])], total_fee=500, cash=0, online=500)

    month = datetime.now(timezone.utc).strftime("%Y-%m")
    listing = client.get(f"/collections?month={month}&branch_id={ref['branch_id']}", headers=headers)
    assert listing.status_code == 200, listing.text
    assert listing.json()["meta"]["count"] == 2
    assert sorted(row["shift_title"] for row in listing.json()["data"]) == ["Evening", "Morning"]

    stats = client.get(f"/collections/stats?month={month}", headers=headers)
    assert stats.status_code == 200, stats.text
    assert stats.json()["data"] == {
        "total_paid": 900,
        "total_due": 600,
        "total_cash": 400,
        "total_online": 500,
        "total_security_money": 200,
    }

    assert client.get("/collections?month=2026-13", headers=headers).status_code == 400
    bad = client.get("/collections?month=January", headers=headers)
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Invalid month format. Use YYYY-MM"


def test_collections_require_view_permission(client, db_session):
    staff = setup_staff(client, db_session, permissions=[Permission.MANAGE_MEMBERS])
    r = client.get("/collections", headers=auth_header(staff["token"]))
    assert r.status_code == 403

    collector = setup_staff(client, db_session, permissions=[Permission.VIEW_COLLECTIONS])
    assert client.get("/collections", headers=auth_header(collector["token"])).status_code == 200


def test_locker_board_and_shift_counts(client, db_session):
    admin = setup_admin(client, db_session)
    ref = seed_reference(db_session)
    headers = auth_header(admin["token"])
    _enroll(client, headers, ref, name="Holder", locker_id=str(ref["locker_1_id"]))
    _enroll(client, headers, ref, name="Both", seat_id=str(ref["seat_b_id"]),
            shift_ids=[str(ref["morning_id"]), str(ref["evening_id"])])

    board = client.get(f"/lockers?branch_id={ref['branch_id']}", headers=headers)
    assert board.status_code == 200, board.text
    lockers = {item["locker_number"]: item for item in board.json()["data"]}
    assert lockers["L1"]["is_assigned"] is True
    assert lockers["L1"]["member_name"] == "Holder"
    assert lockers["L2"]["is_assigned"] is False
    assert lockers["L2"]["member_name"] is None

    shifts = client.get("/shifts/with-members", headers=headers)
    counts = {s["title"]: s["member_count"] for s in shifts.json()["data"]}
    assert counts == {"Evening": 1, "Morning": 2}


def test_locker_board_requires_seat_or_member_permission(client, db_session):
    ref = seed_reference(db_session)
    url = f"/lockers?branch_id={ref['branch_id']}"

    collector = setup_staff(client, db_session, permissions=[Permission.VIEW_COLLECTIONS])
    denied = client.get(url, headers=auth_header(collector["token"]))
    assert denied.status_code == 403
    assert denied.json()["error"] == "permission_denied"

    for perm in (Permission.MANAGE_SEATS, Permission.MANAGE_MEMBERS):
        staff = setup_staff(client, db_session, permissions=[perm])
        r = client.get(url, headers=auth_header(staff["token"]))
        assert r.status_code == 200, perm
        assert r.json()["meta"]["count"] == 2
