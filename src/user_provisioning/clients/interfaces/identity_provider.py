from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from user_provisioning.database.models import Role


@dataclass(frozen=True)
class SessionInfo:
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


@dataclass(frozen=True)
class ActiveIdentity:
    """가입 즉시 활성화되어 세션이 발급된 계정"""
    identity_id: str
    session: SessionInfo


@dataclass(frozen=True)
class PendingIdentity:
    """생성되었지만 이메일 확인 전이라 세션이 없는 계정"""
    identity_id: str


IdentityResult = Union[ActiveIdentity, PendingIdentity]


@dataclass(frozen=True)
class CallerSession:
    """인증된 요청자의 신원과 역할"""
    identity_id: str
    email: Optional[str]
    role: Optional[Role]
    metadata: Dict[str, Any] = field(default_factory=dict)


class IIdentityProvider(ABC):
    @abstractmethod
    def create_identity(self, email: str, password: str, attributes: Dict[str, Any]) -> IdentityResult:
        """
        이메일/비밀번호로 인증 계정을 생성합니다.

        Raises:
            IdentityConflictError: 이미 등록된 이메일일 때.
            IdentityProviderUnavailableError: 전송 오류, 타임아웃, 서버 측 오류.
        """
        pass

    @abstractmethod
    def delete_identity(self, identity_id: str) -> None:
        """관리자 권한으로 인증 계정을 삭제합니다. 실패 시 예외를 던집니다."""
        pass

    @abstractmethod
    def get_session(self, access_token: str) -> CallerSession:
        """
        액세스 토큰으로 요청자 세션을 조회합니다.

        Raises:
            UnauthorizedError: 토큰이 없거나 만료/무효일 때.
        """
        pass
