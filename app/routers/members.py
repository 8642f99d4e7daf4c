"""
members.py

회원 원장(Member Ledger) API 모음.

이 파일은 직원이 회원을 가입시키고, 현재 기간을 정정하고,
새 기간으로 갱신하고, 비활성화 / 영구 삭제하는 라이프사이클 API와
회원 목록 / 상세 / 이력 조회 API를 담당한다.

주요 기능:
- 신규 가입 / 공개 가입(인증 없음)
- 현재 기간 정정(Edit) / 새 기간 갱신(Renew)
- 비활성화 / 재활성화, 영구 삭제
- 전체 / 활성 / 만료 / 만료 임박 / 비활성 회원 목록
- 시간대별 명단, 회원 상세, 기간 이력

설계 원칙:
- 라우터는 입력을 받아 AuthContext 와 함께 서비스에 넘기기만 함
- commit / rollback 은 서비스의 @atomic 이 담당
- 도메인 예외(LedgerError)는 app.main 의 예외 핸들러가 HTTP 응답으로 변환

관련 파일:
- app.services.members   : 라이프사이클 오케스트레이터
- app.services.queries   : 조회 전용 로직
- app.schemas.member     : 요청 / 응답 스키마

"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.deps import get_auth_context, get_current_staff, get_db
from app.core.permissions import AuthContext
from app.schemas.common import envelope
from app.schemas.member import (
    HistoryResponse,
    MemberResponse,
    MemberWriteRequest,
    PublicRegisterRequest,
    StatusUpdateRequest,
    detail_response,
    list_item,
)
from app.services import members as service
from app.services import queries

router = APIRouter(prefix="/members", tags=["members"])


def _member_data(member) -> MemberResponse:
    return MemberResponse.from_member(member, member.status())


"""
신규 회원 가입 API

- manage_members 권한 필요 (ADMIN 은 항상 허용)
- 요금 / 납부액으로 paid, due 계산 후 저장
- 좌석+시간대, 사물함이 이미 점유되어 있으면 409

"""

@router.post("", status_code=201)
def enroll(
    data: MemberWriteRequest,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    member = service.enroll_member(db, ctx, data)
    return {
        "message": "Member enrolled",
        "data": _member_data(member),
    }


"""
공개 가입 API (인증 없음)

- 이름 / 전화번호 / 지점만 받아 1년 멤버십으로 등록
- 금액은 모두 0, 좌석 / 사물함 배정 없음

"""

@router.post("/public/register", status_code=201)
def public_register(data: PublicRegisterRequest, db: Session = Depends(get_db)):
    member = service.register_public_member(db, data)
    return {
        "message": "Registration successful",
        "data": _member_data(member),
    }


@router.get("")
def list_all(
    branch_id: uuid.UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthContext = Depends(get_current_staff),
):
    rows = queries.list_members(db, branch_id=branch_id)
    return envelope([list_item(r) for r in rows])


@router.get("/active")
def list_active(
    branch_id: uuid.UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthContext = Depends(get_current_staff),
):
    rows = queries.active_members(db, branch_id=branch_id)
    return envelope([list_item(r) for r in rows])


@router.get("/expired")
def list_expired(
    branch_id: uuid.UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthContext = Depends(get_current_staff),
):
    rows = queries.expired_members(db, branch_id=branch_id)
    return envelope([list_item(r) for r in rows])


@router.get("/expiring-soon")
def list_expiring_soon(
    branch_id: uuid.UUID | None = Query(default=None),
    days: int | None = Query(default=None, description="기본값: EXPIRING_SOON_DAYS"),
    db: Session = Depends(get_db),
    _: AuthContext = Depends(get_current_staff),
):
    rows = queries.expiring_soon(db, branch_id=branch_id, days=days)
    return envelope([list_item(r) for r in rows])


@router.get("/inactive")
def list_inactive(
    branch_id: uuid.UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    _: AuthContext = Depends(get_current_staff),
):
    rows = queries.inactive_members(db, branch_id=branch_id)
    return envelope([list_item(r) for r in rows])


"""
시간대별 명단 조회 API

- search : 이름 / 전화번호 부분 일치
- status : all / active / expired

"""

@router.get("/shift/{shift_id}")
def shift_roster(
    shift_id: uuid.UUID,
    branch_id: uuid.UUID | None = Query(default=None),
    search: str | None = Query(default=None),
    status: str = Query(default="all"),
    db: Session = Depends(get_db),
    _: AuthContext = Depends(get_current_staff),
):
    rows = queries.roster_for_shift(db, shift_id, branch_id=branch_id, search=search, status=status)
    return envelope([list_item(r) for r in rows])


@router.get("/{member_id}")
def get_member(
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: AuthContext = Depends(get_current_staff),
):
    return {"data": detail_response(queries.member_detail(db, member_id))}


@router.get("/{member_id}/history")
def get_history(
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: AuthContext = Depends(get_current_staff),
):
    rows = queries.member_history(db, member_id)
    return envelope([HistoryResponse.model_validate(h) for h in rows])


"""
현재 기간 정정 API

- 가장 최근 이력 행을 덮어쓰며 이력 행 수는 변하지 않음
- 좌석 / 사물함은 요청 기준으로 다시 배정

"""

@router.put("/{member_id}")
def edit(
    member_id: uuid.UUID,
    data: MemberWriteRequest,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    member = service.edit_member(db, ctx, member_id, data)
    return {
        "message": "Member updated",
        "data": _member_data(member),
    }


"""
멤버십 갱신 API

- 새 이력 행을 추가하고 이전 기간 행은 그대로 보존
- 헤드 레코드는 새 기간 값으로 갱신

"""

@router.post("/{member_id}/renew")
def renew(
    member_id: uuid.UUID,
    data: MemberWriteRequest,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    member = service.renew_membership(db, ctx, member_id, data)
    return {
        "message": "Membership renewed",
        "data": _member_data(member),
    }


@router.put("/{member_id}/status")
def update_status(
    member_id: uuid.UUID,
    data: StatusUpdateRequest,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    member = service.set_member_active(db, ctx, member_id, data.is_active)
    return {
        "message": "Member activated" if member.is_active else "Member deactivated",
        "data": _member_data(member),
    }


# 되돌릴 수 없는 영구 삭제 (비활성화는 PUT /{member_id}/status)
@router.delete("/{member_id}")
def delete_permanently(
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    deleted_id = service.delete_member_permanently(db, ctx, member_id)
    return {
        "message": "Member deleted permanently",
        "data": {"id": str(deleted_id)},
    }
