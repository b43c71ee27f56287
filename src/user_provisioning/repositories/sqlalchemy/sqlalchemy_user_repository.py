import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from user_provisioning.database import models
from user_provisioning.repositories.interfaces import IUserRepository
from user_provisioning.services.exceptions import DuplicateEmailError, PersistenceError

logger = logging.getLogger("user_provisioning.repositories.user")


class SqlalchemyUserRepository(IUserRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, user_model: models.User) -> models.User:
        # 삽입 순서는 같은 INSERT 문 안에서 계산하여, 시각이 같은 레코드도 순서가 정해지도록 합니다.
        user_model.seq = (
            select(func.coalesce(func.max(models.User.seq), 0) + 1).scalar_subquery()
        )
        try:
            self.db.add(user_model)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if self._is_email_conflict(e):
                raise DuplicateEmailError(f"User with email '{user_model.email}' already exists.") from e
            raise PersistenceError(f"Failed to create user '{user_model.email}': {e.orig}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to create user '{user_model.email}': {e}") from e

        # commit 이후의 실패는 저장 실패가 아닙니다. 여기서 예외를 던지면 이미 저장된 레코드의 계정이 보상 삭제됩니다.
        try:
            self.db.refresh(user_model)
        except SQLAlchemyError as e:
            logger.warning("User %s was committed but could not be reloaded: %s", user_model.id, e)
        return user_model

    def find_by_email(self, email: str) -> Optional[models.User]:
        try:
            return self.db.query(models.User).filter(models.User.email == email).first()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to look up user by email: {e}") from e

    def list_all(self) -> List[models.User]:
        try:
            return (
                self.db.query(models.User)
                .options(selectinload(models.User.created_teams))
                .populate_existing()
                .order_by(models.User.seq.asc())
                .all()
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list users: {e}") from e

    @staticmethod
    def _is_email_conflict(error: IntegrityError) -> bool:
        message = str(error.orig).lower()
        return "email" in message and ("unique" in message or "duplicate" in message)
