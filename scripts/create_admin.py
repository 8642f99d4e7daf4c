"""

ADMIN 초기 계정 생성 스크립트.

- 서버 최초 세팅 시 단 한 번 실행하는 용도
- .env에 정의된 ADMIN_* 환경 변수를 읽어
  ADMIN 계정을 생성한다.
- 이미 ADMIN 계정이 존재하면 생성하지 않고 종료한다.

사용 목적:
- 직원 계정 생성 / 권한 부여 API(/admin/staff)에 접근할 수 있는
  최초 관리자 계정을 초기화하기 위함

사용 방법
- 가상환경 접속
- (.venv) ~\backend~$ python -m scripts.create_admin

"""

import os
from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from app.db.session import SessionLocal
from app.models.user import Permission, Role, User
from app.core.security import get_password_hash


def main():
    db = SessionLocal()
    try:
        exists = db.scalar(select(User).where(User.role == Role.ADMIN))
        if exists:
            print("ADMIN already exists. Skip creation.")
            return

        email = os.environ["ADMIN_EMAIL"]
        password = os.environ["ADMIN_PASSWORD"]
        name = os.environ.get("ADMIN_NAME", "Admin")

        email_exists = db.scalar(select(User).where(User.email == email))
        if email_exists:
            raise RuntimeError("Email already exists but is not ADMIN")

        user = User(
            email=email,
            password_hash=get_password_hash(password),
            name=name,
            role=Role.ADMIN,
            # ADMIN 은 권한 검사를 통과하지만 목록에도 전부 기록해 둔다
            permissions=[p.value for p in Permission],
            is_active=True,
        )

        db.add(user)
        db.commit()

        print(f"ADMIN created: {email}")

    finally:
        db.close()


if __name__ == "__main__":
    main()
