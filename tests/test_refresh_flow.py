# tests/test_refresh_flow.py
from tests.helpers import auth_header, create_user_in_db, login


def test_refresh_token_rotation_and_revocation(client, db_session):
    staff = create_user_in_db(db_session)

    access1 = login(client, staff.email)
    assert access1
    refresh1 = client.cookies.get("refresh_token")
    assert refresh1

    r1 = client.post("/auth/refresh")
    assert r1.status_code == 200, r1.text
    access2 = r1.json()["data"]["access_token"]
    assert access2

    refresh2 = client.cookies.get("refresh_token")
    assert refresh2 and refresh2 != refresh1

    # 회전 전 토큰은 더 이상 사용 불가
    client.cookies.clear()
    client.cookies.set("refresh_token", refresh1)
    r_old = client.post("/auth/refresh")
    assert r_old.status_code == 401
    assert r_old.json()["detail"] == "Refresh token revoked"

    client.cookies.clear()
    client.cookies.set("refresh_token", refresh2)
    logout = client.post("/auth/logout", headers=auth_header(access2))
    assert logout.status_code == 204

    # 로그아웃 후에는 마지막 refresh 토큰도 무효
    client.cookies.clear()
    client.cookies.set("refresh_token", refresh2)
    r_after = client.post("/auth/refresh")
    assert r_after.status_code == 401


def test_refresh_without_cookie(client):
    r = client.post("/auth/refresh")
    assert r.status_code == 401
    assert r.json()["detail"] == "Missing refresh token"
