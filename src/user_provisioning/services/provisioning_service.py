import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from user_provisioning.clients.interfaces import IIdentityProvider, IdentityResult, PendingIdentity
from user_provisioning.database import models
from user_provisioning.database.models import Role
from user_provisioning.repositories.interfaces import IUserRepository
from user_provisioning.services.exceptions import EmailAlreadyExistsError, IdentityConflictError
from user_provisioning.services.saga import Saga
from user_provisioning.utils.password import hash_password

logger = logging.getLogger("user_provisioning.provisioning")

PENDING_CONFIRMATION_MESSAGE = "User created. Please check your email to confirm your account."


@dataclass(frozen=True)
class ProvisioningResult:
    user: models.User
    confirmation_pending: bool

    @property
    def message(self) -> Optional[str]:
        return PENDING_CONFIRMATION_MESSAGE if self.confirmation_pending else None


class ProvisioningService:
    """Identity Provider와 레코드 저장소에 걸쳐 사용자 계정을 생성합니다."""

    def __init__(
        self,
        user_repo: IUserRepository,
        identity_provider: IIdentityProvider,
        self_registration_role: Role = Role.ADMIN,
    ):
        """
        ProvisioningService를 초기화합니다.

        Args:
            user_repo: 사용자 레코드에 접근하기 위한 리포지토리.
            identity_provider: 인증 계정을 생성/삭제하는 외부 Identity Provider 클라이언트.
            self_registration_role: 자가 가입으로 생성되는 모든 계정에 부여할 역할.
        """
        self.user_repo = user_repo
        self.identity_provider = identity_provider
        self.self_registration_role = self_registration_role

    def register_user(self, name: str, email: str, password: str, role: Optional[Role] = None) -> ProvisioningResult:
        """
        새로운 사용자를 등록합니다.

        레코드 저장소에서 이메일 중복을 먼저 확인한 뒤, Identity Provider에 계정을 만들고,
        발급된 id로 레코드를 저장합니다. 저장에 실패하면 Identity Provider의 계정을 삭제하는
        보상 작업을 수행한 뒤 원래 오류를 그대로 던집니다. 재시도는 하지 않습니다.

        Args:
            name: 사용자 이름.
            email: 사용자 이메일.
            password: 평문 비밀번호. Identity Provider로 전달되고, 저장소에는 해시만 저장됩니다.
            role: 요청된 역할. 무시되며 항상 self_registration_role이 적용됩니다.

        Returns:
            저장된 사용자와 이메일 확인 대기 여부를 담은 ProvisioningResult.

        Raises:
            EmailAlreadyExistsError: 저장소 또는 Identity Provider에 이미 같은 이메일이 있을 때.
            IdentityProviderUnavailableError: Identity Provider 호출이 실패했을 때.
            DuplicateEmailError: 사전 확인 이후 동시 요청이 먼저 같은 이메일을 저장했을 때.
            PersistenceError: 레코드 저장에 실패했을 때.
        """
        if role is not None and role != self.self_registration_role:
            logger.info("Requested role %s for %s ignored; assigning %s.", role.value, email, self.self_registration_role.value)
        assigned_role = self.self_registration_role

        saga = Saga("register_user")
        saga.step("precheck", lambda ctx: self._ensure_email_available(email))
        saga.step(
            "identity",
            lambda ctx: self._create_identity(name, email, password, assigned_role),
            compensation=lambda ctx: self.identity_provider.delete_identity(ctx["identity"].identity_id),
        )
        saga.step("record", lambda ctx: self._create_record(ctx["identity"], name, email, password, assigned_role))

        context = saga.run()
        identity: IdentityResult = context["identity"]
        pending = isinstance(identity, PendingIdentity)
        if pending:
            logger.info("User %s created, awaiting email confirmation.", identity.identity_id)
        else:
            logger.info("User %s created and signed in.", identity.identity_id)
        return ProvisioningResult(user=context["record"], confirmation_pending=pending)

    def _ensure_email_available(self, email: str) -> None:
        if self.user_repo.find_by_email(email):
            raise EmailAlreadyExistsError("Email already exists")

    def _create_identity(self, name: str, email: str, password: str, role: Role) -> IdentityResult:
        attributes: Dict[str, Any] = {"name": name, "role": role.value}
        try:
            return self.identity_provider.create_identity(email, password, attributes)
        except IdentityConflictError as e:
            raise EmailAlreadyExistsError("Email already exists") from e

    def _create_record(self, identity: IdentityResult, name: str, email: str, password: str, role: Role) -> models.User:
        new_user = models.User(
            id=identity.identity_id,
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role,
        )
        return self.user_repo.create(new_user)
