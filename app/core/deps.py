from typing import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session
from sqlalchemy import select

from app.core.security import decode_access_token
from app.core.permissions import AuthContext
from app.db.session import SessionLocal
from app.models.user import Permission, Role, User

# Swagger Authorize에서 "Bearer 토큰" 입력받는 스키마
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if cred is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = decode_access_token(cred.credentials)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.scalar(select(User).where(User.id == user_id, User.is_active.is_(True)))
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


# 라이프사이클 서비스에 명시적으로 넘길 호출자 컨텍스트
def get_auth_context(current_user: User = Depends(get_current_user)) -> AuthContext:
    return AuthContext.from_user(current_user)


def get_current_staff(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
    ctx.require_staff()
    return ctx


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


# 조회 API 용 권한 게이트 (하나라도 있으면 통과, ADMIN 은 항상 통과)
def require_permission(*perms: Permission):
    def _checker(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
        ctx.require(*perms)
        return ctx
    return _checker
