"""
security.py

직원 로그인용 비밀번호 해싱 및 JWT 토큰 생성/검증 유틸리티 모음.

라우터나 원장 로직은 포함하지 않으며,
인증 흐름(app.routers.auth)과 인증 의존성(app.core.deps)에서만 사용한다.

주요 기능:
- 비밀번호 해싱 및 검증 (bcrypt)
- Access / Refresh Token 발급 (create_token_pair)
- Access / Refresh Token 디코딩 및 타입 검증

설계 원칙:
- Access Token과 Refresh Token은 서로 다른 시크릿으로 서명
- Refresh Token에 version(rtv)을 포함하여 로그아웃 시 일괄 무효화
- 만료(exp)는 UTC 기준

관련 파일:
- app.core.config        : JWT 시크릿 키 및 만료 설정
- app.core.deps          : Access Token 검증 의존성
- app.routers.auth       : 로그인 / 재발급 / 로그아웃 API

"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

TokenType = Literal["access", "refresh"]


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def _secret_for(token_type: TokenType) -> str:
    return settings.SECRET_KEY if token_type == "access" else settings.REFRESH_SECRET_KEY


def _encode(*, subject: str, token_type: TokenType, expires_delta: timedelta, extra: Optional[dict] = None) -> str:
    expire = datetime.now(timezone.utc) + expires_delta
    payload = {
        "sub": subject,
        "type": token_type,
        "exp": int(expire.timestamp()),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, _secret_for(token_type), algorithm=settings.ALGORITHM)


def create_access_token(subject: str, role: str | None = None, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        subject=subject,
        token_type="access",
        expires_delta=expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        extra={"role": role} if role else None,
    )


def create_refresh_token(subject: str, refresh_token_version: int, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        subject=subject,
        token_type="refresh",
        expires_delta=expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        extra={"rtv": refresh_token_version},
    )


# 로그인 / 재발급 시 사용하는 (access, refresh) 쌍
def create_token_pair(user) -> tuple[str, str]:
    access = create_access_token(subject=str(user.id), role=user.role.value)
    refresh = create_refresh_token(subject=str(user.id), refresh_token_version=user.refresh_token_version)
    return access, refresh


"""
토큰 디코딩 공통 함수

- 서명 / 만료 검증 후 type 이 기대값과 다르면 JWTError
- sub 를 UUID 로 변환해 함께 반환

"""

def _decode(token: str, token_type: TokenType) -> tuple[uuid.UUID, dict]:
    payload = jwt.decode(token, _secret_for(token_type), algorithms=[settings.ALGORITHM])
    if payload.get("type") != token_type:
        raise JWTError(f"Not an {token_type} token")
    sub = payload.get("sub")
    if not sub:
        raise JWTError("Missing subject")
    try:
        return uuid.UUID(sub), payload
    except ValueError:
        raise JWTError("Invalid subject")


def decode_access_token(token: str) -> uuid.UUID:
    user_id, _ = _decode(token, "access")
    return user_id


def decode_refresh_token(token: str) -> tuple[uuid.UUID, int]:
    user_id, payload = _decode(token, "refresh")
    return user_id, int(payload.get("rtv", -1))
