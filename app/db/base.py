"""
base.py

SQLAlchemy ORM Base 정의 파일.

모든 원장 모델(User, Branch, Shift, Seat, Locker, Member, SeatAssignment,
MembershipHistory, Payment, ActionLog)은 이 Base를 상속하며,
테스트의 스키마 생성(create_all)과 Alembic 리비전도 이 메타데이터를 기준으로 한다.

관련 파일:
- app.models.*            : 모든 ORM 모델
- alembic/versions/*      : 스키마 리비전

"""

from sqlalchemy.orm import declarative_base

# 모든 ORM 모델이 상속받는 Base 클래스
Base = declarative_base()
