import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from app.core.deps import get_current_admin, get_db
from app.core.security import get_password_hash
from app.models.action_log import ActionLog
from app.models.user import User
from app.schemas.user import PermissionsUpdate, StaffCreateRequest, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


# 관리자가 직원 계정을 생성하는 엔드포인트
@router.post("/staff", status_code=201)
def create_staff(
    data: StaffCreateRequest,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    if db.scalar(select(User.id).where(User.email == data.email)):
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=data.email,
        password_hash=get_password_hash(data.password),
        name=data.name,
        role=data.role,
        # 중복 제거, 순서 유지
        permissions=list(dict.fromkeys(p.value for p in data.permissions)),
        is_active=True,
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Email already registered")
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    logger.info("staff account created", extra={"user_id": str(user.id), "actor_id": str(current_admin.id)})
    return {
        "message": "Staff created",
        "data": UserResponse.model_validate(user),
    }


# 직원 목록 조회 엔드포인트(관리자 전용)
@router.get("/staff")
def list_staff(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    users = db.scalars(select(User).order_by(User.name)).all()
    items = [UserResponse.model_validate(u) for u in users]
    return {"data": items, "meta": {"count": len(items)}}


# 직원 권한 변경 엔드포인트
@router.patch("/staff/{user_id}/permissions")
def update_permissions(
    user_id: uuid.UUID,
    data: PermissionsUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    before = list(user.permissions or [])
    try:
        user.permissions = list(dict.fromkeys(p.value for p in data.permissions))
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    logger.info(
        "staff permissions updated",
        extra={"user_id": str(user.id), "actor_id": str(current_admin.id), "before": before},
    )
    return {
        "message": "Permissions updated",
        "data": UserResponse.model_validate(user),
    }


# 원장 활동 로그 조회 엔드포인트
@router.get("/logs")
def list_action_logs(
    limit: int = 50,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    limit = max(1, min(limit, 200))

    Actor = aliased(User)

    rows = db.execute(
        select(ActionLog, Actor)
        .outerjoin(Actor, Actor.id == ActionLog.actor_id)
        .order_by(desc(ActionLog.created_at))
        .limit(limit)
    ).all()

    result = []
    for log, actor in rows:
        result.append(
            {
                "id": str(log.id),
                "created_at": log.created_at.isoformat(),
                "action": log.action.value,
                "target_member_id": str(log.target_member_id) if log.target_member_id else None,
                "detail": log.detail,
                # 공개 가입은 행위자가 없음
                "actor": (
                    {
                        "id": str(actor.id),
                        "email": actor.email,
                        "name": actor.name,
                        "role": actor.role.value,
                    }
                    if actor
                    else None
                ),
            }
        )
    return {
        "data": result,
        "meta": {
            "limit": limit,
            "count": len(result),
        },
    }
