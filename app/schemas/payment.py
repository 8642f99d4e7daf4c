import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import Money


class PaymentApplyRequest(BaseModel):
    # 범위 / 채널 검증은 서비스(apply_payment)에서 ValidationError 로 처리
    payment_amount: Decimal = Field(..., examples=[600])
    payment_method: str = Field(..., examples=["online"])


class PaymentResponse(BaseModel):
    id: uuid.UUID
    history_id: uuid.UUID
    member_id: uuid.UUID
    amount: Money
    channel: str
    created_by: uuid.UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CollectionItem(BaseModel):
    history_id: uuid.UUID
    member_id: uuid.UUID
    period_no: int
    name: str
    shift_title: Optional[str]
    branch_id: uuid.UUID
    branch_name: Optional[str]
    total_fee: Money
    discount: Money
    amount_paid: Money
    due_amount: Money
    cash: Money
    online: Money
    security_money: Money
    remark: Optional[str]
    changed_at: datetime


class CollectionStats(BaseModel):
    total_paid: Money = Decimal("0")
    total_due: Money = Decimal("0")
    total_cash: Money = Decimal("0")
    total_online: Money = Decimal("0")
    total_security_money: Money = Decimal("0")
