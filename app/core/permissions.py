"""
permissions.py

호출자 신원 + 권한 집합(AuthContext) 정의 파일.

라우터는 인증된 User 를 AuthContext 로 변환해 서비스 함수에 명시적으로 넘긴다.
서비스는 요청 상태(세션 등)를 직접 보지 않고 이 값만으로 권한을 판단한다.

- ADMIN 은 모든 권한 검사를 통과
- STAFF 는 permissions 에 포함된 기능만 사용 가능

"""

import uuid
from dataclasses import dataclass, field

from app.core.errors import PermissionDenied
from app.models.user import Permission, Role, User


@dataclass(frozen=True)
class AuthContext:
    user_id: uuid.UUID | None
    role: Role | None
    permissions: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_user(cls, user: User) -> "AuthContext":
        return cls(
            user_id=user.id,
            role=user.role,
            permissions=frozenset(user.permissions or []),
        )

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls(user_id=None, role=None)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def require_staff(self) -> None:
        if self.role not in (Role.ADMIN, Role.STAFF):
            raise PermissionDenied("Admin or staff access required")

    def require(self, *perms: Permission) -> None:
        """perms 중 하나라도 있으면 통과 (ADMIN 은 항상 통과)."""
        self.require_staff()
        if self.is_admin:
            return
        if not any(p.value in self.permissions for p in perms):
            names = ", ".join(p.value for p in perms)
            raise PermissionDenied(f"Requires permission: {names}")
