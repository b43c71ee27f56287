from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from user_provisioning.clients.interfaces import CallerSession
from user_provisioning.database import models
from user_provisioning.database.models import Role
from user_provisioning.repositories.interfaces import IUserRepository
from user_provisioning.services.exceptions import ForbiddenError, UnauthorizedError


class UserService:
    """사용자 목록 조회 등 관리자 전용 사용자 조회 기능을 제공합니다."""

    def __init__(self, user_repo: IUserRepository):
        self.user_repo = user_repo

    def list_all_users(self, caller: Optional[CallerSession]) -> List[models.User]:
        """
        모든 사용자를 생성 순서대로 조회합니다. ADMIN 역할만 호출할 수 있습니다.

        Raises:
            UnauthorizedError: 유효한 세션이 없을 때.
            ForbiddenError: 요청자의 역할이 ADMIN이 아닐 때.
        """
        if caller is None:
            raise UnauthorizedError("Authentication required.")
        if caller.role != Role.ADMIN:
            raise ForbiddenError("Only administrators can view all users")
        return self.user_repo.list_all()


def serialize_user(user: models.User) -> Dict[str, Any]:
    """등록 응답용 사용자 표현 (비밀번호 해시 제외)"""
    return {"id": user.id, "name": user.name, "email": user.email, "role": user.role.value}


def serialize_user_with_teams(user: models.User) -> Dict[str, Any]:
    """목록 응답용 사용자 표현 (생성 시각과 소유 팀 포함, 비밀번호 해시 제외)"""
    data = serialize_user(user)
    data["createdAt"] = _to_utc_iso(user.created_at)
    data["createdTeams"] = [{"id": team.id, "name": team.name} for team in user.created_teams]
    return data


def _to_utc_iso(value: Optional[datetime]) -> Optional[str]:
    # SQLite는 시간대 정보를 버리므로, 시간대가 없는 값은 저장된 그대로 UTC로 간주합니다.
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()
