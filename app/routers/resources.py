import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.deps import get_current_staff, get_db, require_permission
from app.core.permissions import AuthContext
from app.models.user import Permission
from app.schemas.common import envelope
from app.schemas.resource import LockerBoardItem, ShiftOccupancy
from app.services import queries

router = APIRouter(tags=["resources"])

can_view_lockers = require_permission(Permission.MANAGE_SEATS, Permission.MANAGE_MEMBERS)


# 사물함 배정 현황 (지점 필터, manage_seats 또는 manage_members)
@router.get("/lockers")
def locker_board(
    branch_id: uuid.UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthContext = Depends(can_view_lockers),
):
    rows = queries.locker_board(db, branch_id=branch_id)
    return envelope(
        [
            LockerBoardItem(
                id=r["locker"].id,
                locker_number=r["locker"].locker_number,
                branch_id=r["locker"].branch_id,
                branch_name=r["branch_name"],
                is_assigned=r["locker"].is_assigned,
                member_id=r["locker"].member_id,
                member_name=r["member_name"],
            )
            for r in rows
        ]
    )


# 시간대별 배정 회원 수
@router.get("/shifts/with-members")
def shifts_with_members(
    db: Session = Depends(get_db),
    _: AuthContext = Depends(get_current_staff),
):
    rows = queries.shifts_with_member_counts(db)
    return envelope(
        [
            ShiftOccupancy(
                id=r["shift"].id,
                title=r["shift"].title,
                time=r["shift"].time,
                fee=r["shift"].fee,
                member_count=r["member_count"],
            )
            for r in rows
        ]
    )
