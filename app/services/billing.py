"""
services/billing.py

회원 요금 계산(Billing Calculator) 순수 함수 모음.

- paid = cash + online
- due  = fee - discount - paid

due 는 음수가 될 수 있으며 (할인 + 납부 > 요금) 별도로 보정하지 않는다.
입력 금액(fee / discount / cash / online)은 모두 0 이상이어야 한다.

"""

from decimal import Decimal, InvalidOperation

from app.core.errors import ValidationError

CENT = Decimal("0.01")


def to_amount(value, field_name: str) -> Decimal:
    """숫자/문자열을 소수 둘째 자리 Decimal 로 변환. 음수나 숫자가 아니면 ValidationError."""
    if value is None:
        return Decimal("0.00")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a valid non-negative number")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a valid non-negative number")
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{field_name} must be a valid non-negative number")
    return amount.quantize(CENT)


def paid(cash: Decimal, online: Decimal) -> Decimal:
    return cash + online


def due(fee: Decimal, discount: Decimal, paid_amount: Decimal) -> Decimal:
    return fee - discount - paid_amount
