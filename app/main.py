"""
main.py

FastAPI 애플리케이션 진입점(Entry Point).

이 파일은 서버 실행 시 가장 먼저 로드되며,
애플리케이션 전반의 설정과 라우터 등록을 담당한다.

주요 역할:
- 로깅 설정 및 FastAPI 앱 인스턴스 생성
- CORS 미들웨어 설정
- 원장 도메인 예외(LedgerError) → HTTP 응답 변환
- 각 도메인별 라우터(auth, admin, members, collections, resources) 등록
- 헬스 체크 및 DB 연결 상태 확인용 엔드포인트 제공

설계 원칙:
- 비즈니스 로직은 포함하지 않고 설정/조립 역할만 수행
- 실제 기능은 routers / services 계층에 위임
- 서비스는 HTTP 를 모르며, 상태 코드는 예외 클래스가 결정

관련 파일:
- app.core.config        : 환경 변수 및 설정 로드
- app.core.errors        : 도메인 예외 정의
- app.core.logging       : 로깅 설정
- app.routers.*          : 기능별 API 라우터

"""

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.deps import get_db
from app.core.errors import LedgerError
from app.core.logging import setup_logging
from app.routers import admin, auth, collections, members, resources

setup_logging(settings.LOG_LEVEL)

logger = logging.getLogger(__name__)

app = FastAPI(title="Library Membership Ledger")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


"""
도메인 예외 핸들러

- ValidationError 400 / PermissionDenied 403 / NotFound 404 / Conflict 409 / Internal 500
- 응답 형식: {"detail": 메시지, "error": 예외 종류}

"""
@app.exception_handler(LedgerError)
def ledger_error_handler(request: Request, exc: LedgerError):
    if exc.status_code >= 500:
        logger.error("ledger error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind},
    )


app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(members.router)
app.include_router(collections.router)
app.include_router(resources.router)

"""
서버 헬스 체크 엔드포인트

- 애플리케이션 프로세스가 정상 동작 중인지 확인
- 로드밸런서 / 배포 환경에서 서버 상태 확인 용도

"""
@app.get("/health")
def health():
    return {"status": "ok"}

"""
데이터베이스 연결 상태 확인 엔드포인트

- 간단한 SELECT 1 쿼리를 통해 DB 연결 여부 확인
- 서버는 살아 있으나 DB가 죽은 상황을 분리해서 감지 가능

"""
@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    value = db.execute(text("SELECT 1")).scalar_one()
    return {"db": "ok", "value": value}
