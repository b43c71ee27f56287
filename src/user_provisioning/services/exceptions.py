# src/user_provisioning/services/exceptions.py

# --- Registration Exceptions ---
class EmailAlreadyExistsError(Exception):
    """이메일이 이미 레코드 저장소 또는 Identity Provider에 등록되어 있을 때"""
    pass

# --- Identity Provider Exceptions ---
class IdentityConflictError(Exception):
    """Identity Provider에 동일한 이메일의 계정이 이미 존재할 때"""
    pass

class IdentityProviderUnavailableError(Exception):
    """Identity Provider 호출이 전송 오류, 타임아웃, 서버 측 오류로 실패했을 때"""
    pass

# --- Persistence Exceptions ---
class PersistenceError(Exception):
    """레코드 저장소 쓰기/읽기 실패 시"""
    pass

class DuplicateEmailError(PersistenceError):
    """저장소의 이메일 unique 제약에 걸렸을 때 (동시 가입 경합)"""
    pass

# --- Saga Exceptions ---
class CompensationError(Exception):
    """보상 작업 자체가 실패했을 때. 로그로만 남기고 호출자에게는 노출하지 않습니다."""
    pass

# --- Auth Exceptions ---
class UnauthorizedError(Exception):
    """세션이 없거나 유효하지 않을 때"""
    pass

class ForbiddenError(Exception):
    """세션은 유효하지만 역할이 부족할 때"""
    pass
