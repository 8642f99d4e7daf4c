"""
transaction.py

서비스 함수의 트랜잭션 경계(Transaction Boundary) 정의 파일.

회원 라이프사이클(가입/수정/갱신/비활성화/삭제)과 납부 처리는
각각 하나의 all-or-nothing 트랜잭션으로 실행되어야 한다.
atomic 데코레이터는 서비스 함수 실행 후 commit 하고,
어떤 오류든 발생하면 전체를 rollback 한다.

설계 원칙:
- 도메인 예외(LedgerError)는 롤백 후 그대로 전파
- 예상하지 못한 SQLAlchemyError 는 롤백 후 Internal 로 변환
- PostgreSQL 직렬화 실패(40001) / 데드락(40P01)만 전체 재시도
- 유니크 제약 위반(실제 자원 충돌)은 재시도하지 않음

관련 파일:
- app.services.members   : 라이프사이클 오케스트레이터
- app.services.payments  : 부분 납부 처리
- app.core.errors        : 도메인 예외

"""

import logging
from functools import wraps

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import Internal, LedgerError

logger = logging.getLogger(__name__)

RETRYABLE_SQLSTATES = {"40001", "40P01"}


def _is_retryable(exc: DBAPIError) -> bool:
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    return code in RETRYABLE_SQLSTATES


"""
트랜잭션 데코레이터

- 첫 번째 인자는 반드시 Session
- 성공 시 commit 후 반환값 그대로 반환
- 실패 시 rollback, 재시도 가능한 오류면 TX_MAX_RETRIES 까지 재실행

"""

def atomic(fn):
    @wraps(fn)
    def wrapper(db: Session, *args, **kwargs):
        attempts = max(1, settings.TX_MAX_RETRIES)
        for attempt in range(1, attempts + 1):
            try:
                result = fn(db, *args, **kwargs)
                db.commit()
                return result
            except LedgerError:
                db.rollback()
                raise
            except DBAPIError as e:
                db.rollback()
                if _is_retryable(e) and attempt < attempts:
                    logger.warning(
                        "transient failure in %s, retrying (%d/%d)",
                        fn.__name__, attempt, attempts,
                    )
                    continue
                logger.exception("storage failure in %s", fn.__name__)
                raise Internal(f"Database error: {type(e).__name__}") from e
            except SQLAlchemyError as e:
                db.rollback()
                logger.exception("storage failure in %s", fn.__name__)
                raise Internal(f"Database error: {type(e).__name__}") from e
            except Exception:
                db.rollback()
                raise
    return wrapper
