"""
services/action_log.py

원장 행위 로그 기록 서비스.

라이프사이클 서비스와 납부 서비스에서 호출되며,
실제 데이터 변경과 같은 트랜잭션 안에서 ActionLog 행을 추가한다.

NOTE:
- db.commit()은 호출 측(app.db.transaction.atomic)에서 수행

"""

from sqlalchemy.orm import Session

from app.models.action_log import ActionLog, LedgerAction


def write_action_log(
    db: Session,
    *,
    actor_id,
    action: LedgerAction,
    target_member_id=None,
    detail=None,
):
    log = ActionLog(
        actor_id=actor_id,
        action=action,
        target_member_id=target_member_id,
        detail=detail,
    )
    db.add(log)
