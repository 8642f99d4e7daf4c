"""

action_log.py

회원 라이프사이클 행위 기록(Audit Log) 모델 정의 파일.

이 파일은 직원에 의해 수행된 주요 원장 행위
(가입, 수정, 갱신, 비활성화, 영구 삭제, 납부)를
DB에 영구적으로 기록하기 위한 로그 테이블을 정의한다.

설계 원칙:
- 실제 데이터 변경과 같은 트랜잭션에서 기록
- 로그 데이터는 수정/삭제하지 않는 것을 전제로 설계
- target_member_id 는 FK 가 아님 (영구 삭제된 회원의 로그도 남아야 함)

"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.resource import utcnow


#  원장 행위 유형 Enum

class LedgerAction(str, Enum):
    ENROLL = "ENROLL"
    PUBLIC_REGISTER = "PUBLIC_REGISTER"
    EDIT = "EDIT"
    RENEW = "RENEW"
    DEACTIVATE = "DEACTIVATE"
    REACTIVATE = "REACTIVATE"
    DELETE = "DELETE"
    PAYMENT = "PAYMENT"


"""
원장 행위 로그 모델

- actor_id         : 행위를 수행한 직원 ID (공개 가입은 없음)
- target_member_id : 행위 대상 회원 ID
- action           : 수행된 행위 유형
- detail           : 사람이 읽을 수 있는 요약 (예: 납부 금액 / 채널)
- created_at       : 행위 발생 시각 (UTC)

"""

class ActionLog(Base):
    __tablename__ = "action_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    actor_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    target_member_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)

    action: Mapped[LedgerAction] = mapped_column(SAEnum(LedgerAction, name="ledger_action"), nullable=False)
    detail: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
