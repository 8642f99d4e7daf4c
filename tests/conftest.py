import os

# app.core.config 가 import 시점에 Settings() 를 만들기 때문에 먼저 기본값을 채워 둔다
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_ledger.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("REFRESH_SECRET_KEY", "test-refresh-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete, update
from sqlalchemy.orm import sessionmaker

from app.main import app as fastapi_app
from app.core.config import settings
from app.core.deps import get_db
from app.db.base import Base
from app.db.session import make_engine

# 모델 import (Base.metadata에 테이블 등록)
import app.models.user  # noqa: F401
import app.models.resource  # noqa: F401
import app.models.member  # noqa: F401
import app.models.history  # noqa: F401
import app.models.action_log  # noqa: F401
from app.models.resource import Locker


# TEST_DATABASE_URL 이 없으면 로컬 SQLite 파일로 실행
TEST_DB_URL = settings.TEST_DATABASE_URL or os.getenv("TEST_DATABASE_URL") or "sqlite:///./test_ledger.db"

engine = make_engine(TEST_DB_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """테스트 전체 시작/종료 때만 스키마 생성/삭제"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    """각 테스트마다 데이터 초기화 (테이블은 유지, row만 삭제)"""
    yield
    with engine.begin() as conn:
        # lockers.member_id <-> members.locker_id 순환 참조를 먼저 끊는다
        conn.execute(update(Locker).values(member_id=None, is_assigned=False))
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(delete(table))


@pytest.fixture()
def db():
    """테스트에서 직접 DB 조작할 때 쓰는 세션"""
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture()
def db_session(db):
    return db


@pytest.fixture()
def client():
    fastapi_app.dependency_overrides[get_db] = override_get_db
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def session_factory():
    """동시 요청 흉내용: 서로 독립된 세션을 여러 개 만들 때 사용"""
    return TestingSessionLocal
