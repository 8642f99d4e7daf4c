"""
services/payments.py

부분 납부(Payment Processor) 비즈니스 로직.

특정 이력 행(청구 기간)의 미납액에 대해 납부를 반영한다.
이력 행 합계와 회원 헤드 합계라는 두 집계를 항상 함께 움직여야 하므로
원장에서 가장 실패에 민감한 경로이다.

처리 순서:
1. 금액(> 0) / 채널(cash, online) 검증
2. 소유 회원 행, 이력 행 순서로 SELECT ... FOR UPDATE 잠금
3. 금액이 이력 행 due + 허용 오차(0.01) 를 넘으면 Conflict
4. 이력 행: 채널 금액, amount_paid 증가 / due 감소
5. 회원 헤드: 같은 값으로 증가 / 감소
6. Payment 기록 + 행위 로그 작성 후 하나의 트랜잭션으로 commit

관련 파일:
- app.models.history     : MembershipHistory / Payment 모델
- app.db.transaction     : atomic (commit / rollback)

"""

import logging
import uuid
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import Conflict, NotFound, ValidationError
from app.core.permissions import AuthContext
from app.db.transaction import atomic
from app.models.action_log import LedgerAction
from app.models.history import MembershipHistory, Payment
from app.models.member import Member
from app.models.user import Permission
from app.services.action_log import write_action_log
from app.services.billing import CENT

logger = logging.getLogger(__name__)

CHANNELS = ("cash", "online")


def _validate_amount(amount) -> Decimal:
    if amount is None or isinstance(amount, bool):
        raise ValidationError("Invalid payment amount")
    try:
        value = Decimal(str(amount))
        if not value.is_finite():
            raise ValidationError("Invalid payment amount")
        # 반올림 후 0 이 되는 금액(예: 0.001)도 거절
        value = value.quantize(CENT)
    except ArithmeticError:
        raise ValidationError("Invalid payment amount")
    if value <= 0:
        raise ValidationError("Invalid payment amount")
    return value


def _apply(row, amount: Decimal, channel: str) -> None:
    if channel == "cash":
        row.cash = row.cash + amount
    else:
        row.online = row.online + amount
    row.amount_paid = row.amount_paid + amount
    row.due_amount = row.due_amount - amount


@atomic
def apply_payment(
    db: Session,
    ctx: AuthContext,
    *,
    history_id: uuid.UUID,
    amount,
    channel: str,
) -> MembershipHistory:
    ctx.require(Permission.VIEW_COLLECTIONS)

    value = _validate_amount(amount)
    if channel not in CHANNELS:
        raise ValidationError("Invalid payment method")

    # 잠금 순서는 회원 행 → 이력 행 (edit / renew 와 같은 순서)
    member_id = db.scalar(select(MembershipHistory.member_id).where(MembershipHistory.id == history_id))
    if member_id is None:
        raise NotFound("History record not found")

    member = db.scalar(select(Member).where(Member.id == member_id).with_for_update())
    if member is None:
        raise NotFound(f"Member with ID {member_id} not found")

    history = db.scalar(
        select(MembershipHistory).where(MembershipHistory.id == history_id).with_for_update()
    )
    if history is None:
        raise NotFound("History record not found")

    # 허용 오차는 반올림 보호용이지 초과 납부 허용이 아님
    if value > history.due_amount + settings.PAYMENT_TOLERANCE:
        raise Conflict(
            f"Payment of {value:.2f} exceeds the due amount of {history.due_amount:.2f} "
            f"for this specific transaction."
        )

    _apply(history, value, channel)
    _apply(member, value, channel)

    db.add(
        Payment(
            history_id=history.id,
            member_id=member.id,
            amount=value,
            channel=channel,
            created_by=ctx.user_id,
        )
    )
    write_action_log(
        db,
        actor_id=ctx.user_id,
        action=LedgerAction.PAYMENT,
        target_member_id=member.id,
        detail=f"{channel} {value:.2f} on period {history.period_no}",
    )
    db.flush()

    logger.info(
        "payment applied",
        extra={"member_id": str(member.id), "history_id": str(history.id), "amount": str(value), "channel": channel},
    )
    return history
