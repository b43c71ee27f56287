import logging
from typing import Any, Dict, Optional

import httpx

from user_provisioning.clients.interfaces import (
    ActiveIdentity,
    CallerSession,
    IdentityResult,
    IIdentityProvider,
    PendingIdentity,
    SessionInfo,
)
from user_provisioning.database.models import Role
from user_provisioning.services.exceptions import (
    IdentityConflictError,
    IdentityProviderUnavailableError,
    UnauthorizedError,
)

logger = logging.getLogger("user_provisioning.clients.gotrue")

# GoTrue가 중복 가입에 대해 돌려주는 error_code / 메시지
_CONFLICT_ERROR_CODES = {"user_already_exists", "email_exists"}
_CONFLICT_MESSAGE = "already registered"


class GoTrueIdentityProvider(IIdentityProvider):
    """GoTrue(Supabase Auth) REST API를 사용하는 Identity Provider 클라이언트."""

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        service_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            base_url: 프로젝트 URL (예: https://xyz.supabase.co). /auth/v1 경로는 내부에서 붙입니다.
            anon_key: 가입/세션 조회에 사용하는 공개 키.
            service_key: 관리자 삭제에 사용하는 service role 키.
            timeout: 모든 요청에 적용되는 시간 제한(초).
            transport: 테스트에서 httpx.MockTransport를 주입하기 위한 선택 인자.
        """
        self.anon_key = anon_key
        self.service_key = service_key
        self.client = httpx.Client(
            base_url=f"{base_url.rstrip('/')}/auth/v1",
            timeout=timeout,
            transport=transport,
        )

    def create_identity(self, email: str, password: str, attributes: Dict[str, Any]) -> IdentityResult:
        payload = {"email": email, "password": password, "data": attributes}
        response = self._request("POST", "/signup", json=payload, headers={"apikey": self.anon_key})

        if response.status_code in (400, 422) and self._is_conflict(response):
            raise IdentityConflictError(f"Email '{email}' is already registered at the identity provider.")
        if response.is_error:
            raise IdentityProviderUnavailableError(
                f"Identity provider signup failed with status {response.status_code}: {self._error_message(response)}"
            )

        body = self._json(response)
        if "access_token" in body:
            user = body.get("user") or {}
            if not user.get("id"):
                raise IdentityProviderUnavailableError("Failed to create authentication user")
            session = SessionInfo(
                access_token=body["access_token"],
                refresh_token=body.get("refresh_token"),
                expires_in=body.get("expires_in"),
            )
            return ActiveIdentity(identity_id=user["id"], session=session)

        if not body.get("id"):
            raise IdentityProviderUnavailableError("Failed to create authentication user")

        # 이메일 확인이 켜진 상태에서 이미 가입된 이메일이면, 열거 방지를 위해 identities가 빈 가짜 사용자를 돌려줍니다.
        if body.get("identities") == []:
            raise IdentityConflictError(f"Email '{email}' is already registered at the identity provider.")

        return PendingIdentity(identity_id=body["id"])

    def delete_identity(self, identity_id: str) -> None:
        headers = {"apikey": self.service_key, "Authorization": f"Bearer {self.service_key}"}
        response = self._request("DELETE", f"/admin/users/{identity_id}", headers=headers)
        if response.status_code == 404:
            logger.info("Identity %s was already absent at the identity provider.", identity_id)
            return
        if response.is_error:
            raise IdentityProviderUnavailableError(
                f"Failed to delete identity '{identity_id}' (status {response.status_code}): {self._error_message(response)}"
            )

    def get_session(self, access_token: str) -> CallerSession:
        if not access_token:
            raise UnauthorizedError("Missing access token.")

        headers = {"apikey": self.anon_key, "Authorization": f"Bearer {access_token}"}
        response = self._request("GET", "/user", headers=headers)
        if response.status_code in (401, 403):
            raise UnauthorizedError("Session is invalid or has expired.")
        if response.is_error:
            raise IdentityProviderUnavailableError(
                f"Identity provider session lookup failed with status {response.status_code}."
            )

        user = self._json(response)
        if not user.get("id"):
            raise UnauthorizedError("Session is invalid or has expired.")
        metadata = user.get("user_metadata") or {}
        return CallerSession(
            identity_id=user["id"],
            email=user.get("email"),
            role=self._parse_role(metadata.get("role")),
            metadata=metadata,
        )

    def close(self) -> None:
        self.client.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return self.client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise IdentityProviderUnavailableError(f"Identity provider timed out on {method} {path}.") from e
        except httpx.HTTPError as e:
            raise IdentityProviderUnavailableError(f"Identity provider request {method} {path} failed: {e}") from e

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise IdentityProviderUnavailableError("Identity provider returned a non-JSON response.") from e
        if not isinstance(body, dict):
            raise IdentityProviderUnavailableError("Identity provider returned an unexpected response body.")
        return body

    @classmethod
    def _is_conflict(cls, response: httpx.Response) -> bool:
        try:
            body = response.json()
        except ValueError:
            return False
        if not isinstance(body, dict):
            return False
        if body.get("error_code") in _CONFLICT_ERROR_CODES:
            return True
        return _CONFLICT_MESSAGE in cls._error_message(response).lower()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            return str(body.get("msg") or body.get("error_description") or body.get("message") or body.get("error") or body)
        return str(body)

    @staticmethod
    def _parse_role(value: Any) -> Optional[Role]:
        if not isinstance(value, str):
            return None
        try:
            return Role(value.upper())
        except ValueError:
            return None
