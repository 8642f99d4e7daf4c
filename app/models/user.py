"""
user.py

직원(User) 계정 및 권한(Role / Permission) 모델 정의 파일.

회원 원장을 조작하는 주체는 지점 직원과 관리자이며,
이 모델은 로그인 정보와 역할, 세부 권한 목록을 관리한다.
라이프사이클 서비스는 이 모델을 직접 보지 않고
app.core.permissions.AuthContext 로 변환된 값만 전달받는다.

"""

import uuid
from enum import Enum

from sqlalchemy import JSON, Boolean, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


"""
직원 역할(Role) 정의

- ADMIN : 관리자. 모든 권한 검사를 통과
- STAFF : 지점 직원. permissions 목록에 있는 기능만 사용 가능

"""

class Role(str, Enum):
    ADMIN = "ADMIN"
    STAFF = "STAFF"


class Permission(str, Enum):
    MANAGE_MEMBERS = "manage_members"
    VIEW_COLLECTIONS = "view_collections"
    MANAGE_SEATS = "manage_seats"


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(50), nullable=False)

    role: Mapped[Role] = mapped_column(default=Role.STAFF)
    # Permission 값(str) 목록
    permissions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    refresh_token_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
