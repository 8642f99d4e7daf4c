from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.user import Permission, Role


# 🔹 관리자용 직원 계정 생성 요청
class StaffCreateRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=64)
    name: str
    role: Role = Role.STAFF
    permissions: List[Permission] = Field(default_factory=list)


# 🔹 직원 권한 변경 요청
class PermissionsUpdate(BaseModel):
    permissions: List[Permission]


# 🔹 직원 응답용 (필요한 필드만)
class UserResponse(BaseModel):
    id: UUID
    email: str
    name: str
    role: Role
    permissions: List[str]
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
