# tests/helpers.py
import uuid
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import func, select

from app.core.permissions import AuthContext
from app.core.security import get_password_hash
from app.models.history import MembershipHistory
from app.models.resource import Branch, Locker, Seat, Shift
from app.models.user import Permission, Role, User

PASSWORD = "Passw0rd!123"


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_user_in_db(
    db: Session,
    *,
    role: Role = Role.STAFF,
    permissions: list[Permission] | None = None,
    email: str | None = None,
    password: str = PASSWORD,
    is_active: bool = True,
) -> User:
    user = User(
        email=email or f"{role.value.lower()}_{uuid.uuid4().hex[:6]}@test.com",
        password_hash=get_password_hash(password),
        name=role.value,
        role=role,
        permissions=[p.value for p in (permissions or [])],
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_admin_in_db(db: Session, **kwargs) -> User:
    return create_user_in_db(db, role=Role.ADMIN, **kwargs)


def login(client, email: str, password: str = PASSWORD) -> str:
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["data"]["access_token"]


def setup_admin(client, db: Session) -> dict:
    admin = create_admin_in_db(db)
    return {"user": admin, "token": login(client, admin.email)}


def setup_staff(client, db: Session, permissions: list[Permission] | None = None) -> dict:
    staff = create_user_in_db(db, role=Role.STAFF, permissions=permissions)
    return {"user": staff, "token": login(client, staff.email)}


def ctx_for(user: User) -> AuthContext:
    return AuthContext.from_user(user)


"""
참조 데이터 세팅

- 지점 1개, 시간대 2개(morning / evening), 좌석 2개, 사물함 2개
- 테스트에서는 id 만 꺼내 쓰도록 dict 로 반환

"""

def seed_reference(db: Session) -> dict:
    branch = Branch(name=f"Main-{uuid.uuid4().hex[:4]}", address="1 Library Road")
    db.add(branch)
    db.flush()

    morning = Shift(title="Morning", time="06:00-12:00", fee=Decimal("500"))
    evening = Shift(title="Evening", time="12:00-18:00", fee=Decimal("600"))
    seat_a = Seat(branch_id=branch.id, seat_number="A1")
    seat_b = Seat(branch_id=branch.id, seat_number="A2")
    locker_1 = Locker(branch_id=branch.id, locker_number="L1")
    locker_2 = Locker(branch_id=branch.id, locker_number="L2")
    db.add_all([morning, evening, seat_a, seat_b, locker_1, locker_2])
    db.commit()

    return {
        "branch_id": branch.id,
        "morning_id": morning.id,
        "evening_id": evening.id,
        "seat_a_id": seat_a.id,
        "seat_b_id": seat_b.id,
        "locker_1_id": locker_1.id,
        "locker_2_id": locker_2.id,
    }


def member_payload(ref: dict, **overrides) -> dict:
    """HTTP 요청용 가입 / 수정 / 갱신 바디 (JSON 직렬화 가능한 값)."""
    today = date.today()
    body = {
        "name": "Asha",
        "phone": f"98{uuid.uuid4().int % 10**8:08d}",
        "branch_id": str(ref["branch_id"]),
        "membership_start": today.isoformat(),
        "membership_end": (today + timedelta(days=30)).isoformat(),
        "total_fee": 1000,
        "discount": 0,
        "cash": 400,
        "online": 0,
        "seat_id": str(ref["seat_a_id"]),
        "shift_ids": [str(ref["morning_id"])],
    }
    body.update(overrides)
    return body


def history_count(db: Session, member_id) -> int:
    member_id = uuid.UUID(str(member_id))
    db.expire_all()
    return db.scalar(
        select(func.count()).select_from(MembershipHistory).where(MembershipHistory.member_id == member_id)
    )


def history_rows(db: Session, member_id) -> list[MembershipHistory]:
    member_id = uuid.UUID(str(member_id))
    db.expire_all()
    return list(
        db.scalars(
            select(MembershipHistory)
            .where(MembershipHistory.member_id == member_id)
            .order_by(MembershipHistory.period_no)
        ).all()
    )
