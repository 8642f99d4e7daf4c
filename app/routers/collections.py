"""
collections.py

수납(Collection) API 모음.

이력 행(청구 기간) 단위로 납부 현황을 조회하고,
특정 이력 행의 미납액에 대해 부분 납부를 반영한다.

주요 기능:
- 월별 / 지점별 수납 목록 및 합계
- 이력 행 단위 부분 납부 (cash / online)
- 이력 행별 납부 기록 조회

설계 원칙:
- view_collections 권한 필요 (ADMIN 은 항상 허용)
- 납부는 이력 행과 회원 헤드를 한 트랜잭션에서 함께 갱신
- month 형식(YYYY-MM) 오류는 400

관련 파일:
- app.services.payments  : 부분 납부 처리
- app.services.queries   : 수납 조회 / 합계
- app.schemas.payment    : 요청 / 응답 스키마

"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.deps import get_auth_context, get_db, require_permission
from app.core.permissions import AuthContext
from app.models.user import Permission
from app.schemas.common import envelope
from app.schemas.member import HistoryResponse
from app.schemas.payment import CollectionItem, CollectionStats, PaymentApplyRequest, PaymentResponse
from app.services import queries
from app.services.payments import apply_payment

router = APIRouter(prefix="/collections", tags=["collections"])

can_view_collections = require_permission(Permission.VIEW_COLLECTIONS)


def _collection_item(row: dict) -> CollectionItem:
    h = row["history"]
    return CollectionItem(
        history_id=h.id,
        member_id=h.member_id,
        period_no=h.period_no,
        name=h.name,
        shift_title=row["shift_title"],
        branch_id=h.branch_id,
        branch_name=row["branch_name"],
        total_fee=h.total_fee,
        discount=h.discount,
        amount_paid=h.amount_paid,
        due_amount=h.due_amount,
        cash=h.cash,
        online=h.online,
        security_money=h.security_money,
        remark=h.remark,
        changed_at=h.changed_at,
    )


@router.get("")
def list_collections(
    month: str | None = Query(default=None, description="예: 2026-01"),
    branch_id: uuid.UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthContext = Depends(can_view_collections),
):
    rows = queries.collections(db, month=month, branch_id=branch_id)
    return envelope([_collection_item(r) for r in rows])


@router.get("/stats")
def collection_stats(
    month: str | None = Query(default=None, description="예: 2026-01"),
    branch_id: uuid.UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthContext = Depends(can_view_collections),
):
    totals = queries.collection_stats(db, month=month, branch_id=branch_id)
    return {"data": CollectionStats(**totals)}


"""
부분 납부 API

- payment_amount : 0 보다 큰 금액
- payment_method : cash / online
- 이력 행 due + 0.01 을 넘는 금액은 409 (상태 변경 없음)

"""

@router.put("/{history_id}")
def pay(
    history_id: uuid.UUID,
    data: PaymentApplyRequest,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    history = apply_payment(
        db,
        ctx,
        history_id=history_id,
        amount=data.payment_amount,
        channel=data.payment_method,
    )
    return {
        "message": "Payment applied",
        "data": HistoryResponse.model_validate(history),
    }


@router.get("/{history_id}/payments")
def list_payments(
    history_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: AuthContext = Depends(can_view_collections),
):
    rows = queries.payments_for_history(db, history_id)
    return envelope([PaymentResponse.model_validate(p) for p in rows])
