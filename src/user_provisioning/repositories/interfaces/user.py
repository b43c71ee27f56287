from abc import ABC, abstractmethod
from typing import List, Optional
from user_provisioning.database import models

class IUserRepository(ABC):
    @abstractmethod
    def create(self, user_model: models.User) -> models.User:
        """
        새로운 사용자를 데이터베이스에 생성합니다.

        Raises:
            DuplicateEmailError: 같은 이메일의 레코드가 먼저 저장되었을 때.
            PersistenceError: 그 밖의 저장 실패(연결, 타임아웃 등).
        """
        pass

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[models.User]:
        """이메일로 특정 사용자를 조회합니다."""
        pass

    @abstractmethod
    def list_all(self) -> List[models.User]:
        """모든 사용자를 생성 순서대로, 소유한 팀 목록과 함께 조회합니다."""
        pass
