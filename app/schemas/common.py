from decimal import Decimal
from typing import Annotated

from pydantic import PlainSerializer


# 금액은 DB 에서 Decimal 로 다루고, JSON 응답에서는 숫자로 내보낸다
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def envelope(items: list) -> dict:
    return {"data": items, "meta": {"count": len(items)}}
