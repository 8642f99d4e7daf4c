"""
errors.py

회원 원장(ledger) 도메인 예외 정의 파일.

서비스 계층은 HTTP 를 모르는 상태에서 이 예외들을 발생시키고,
app.main 의 예외 핸들러가 status_code / kind 를 그대로 응답으로 변환한다.

- ValidationError  : 잘못된 입력. 어떤 쓰기도 일어나기 전에 발생
- NotFound         : 참조한 회원 / 이력 행이 없음
- Conflict         : 자원(좌석·사물함)이 이미 점유됨, 또는 초과 납부
- PermissionDenied : AuthContext 에 필요한 권한이 없음
- Internal         : 예상하지 못한 저장소 오류 (항상 롤백 후 발생)

"""


class LedgerError(Exception):
    status_code = 500
    kind = "internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ValueError 를 함께 상속하여 기존 `except ValueError` 흐름과도 호환
class ValidationError(LedgerError, ValueError):
    status_code = 400
    kind = "validation_error"


class NotFound(LedgerError, LookupError):
    status_code = 404
    kind = "not_found"


class Conflict(LedgerError):
    status_code = 409
    kind = "conflict"


class PermissionDenied(LedgerError):
    status_code = 403
    kind = "permission_denied"


class Internal(LedgerError):
    status_code = 500
    kind = "internal"
