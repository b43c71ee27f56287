# tests/repositories/test_sqlalchemy_user_repository.py
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from user_provisioning.database import models
from user_provisioning.database.models import Role
from user_provisioning.repositories.sqlalchemy import SqlalchemyUserRepository
from user_provisioning.services.exceptions import DuplicateEmailError, PersistenceError


def make_user(user_id, email, name="Ann", **kwargs):
    return models.User(id=user_id, name=name, email=email, password_hash="hash", role=Role.ADMIN, **kwargs)

@pytest.fixture
def user_repo(db_session) -> SqlalchemyUserRepository:
    return SqlalchemyUserRepository(db_session)


class TestCreate:
    def test_create_keeps_provider_issued_id(self, user_repo):
        """DB는 id를 생성하지 않고 전달된 id를 그대로 저장합니다."""
        created = user_repo.create(make_user("provider-id-1", "ann@x.com"))

        assert created.id == "provider-id-1"
        assert created.created_at is not None
        assert user_repo.find_by_email("ann@x.com").id == "provider-id-1"

    def test_duplicate_email_raises_duplicate_email_error(self, user_repo):
        """이메일 unique 제약이 최종 방어선입니다."""
        user_repo.create(make_user("id-1", "ann@x.com"))

        with pytest.raises(DuplicateEmailError):
            user_repo.create(make_user("id-2", "ann@x.com"))

        # 롤백 이후에도 세션은 계속 사용할 수 있어야 함
        assert user_repo.find_by_email("ann@x.com").id == "id-1"

    def test_duplicate_id_raises_persistence_error(self, user_repo):
        user_repo.create(make_user("id-1", "ann@x.com"))

        with pytest.raises(PersistenceError) as exc_info:
            user_repo.create(make_user("id-1", "other@x.com"))

        assert not isinstance(exc_info.value, DuplicateEmailError)

    def test_database_failure_raises_persistence_error(self):
        """연결 오류나 타임아웃 같은 저장 실패는 PersistenceError로 변환됩니다."""
        session = MagicMock()
        session.commit.side_effect = OperationalError("INSERT", {}, Exception("database is locked"))
        repo = SqlalchemyUserRepository(session)

        with pytest.raises(PersistenceError, match="database is locked"):
            repo.create(make_user("id-1", "ann@x.com"))

        session.rollback.assert_called_once()

    def test_reload_failure_after_commit_returns_saved_user(self, caplog):
        """commit 이후 다시 조회하지 못해도 저장은 성공한 것으로 처리합니다."""
        session = MagicMock()
        session.refresh.side_effect = OperationalError("SELECT", {}, Exception("connection reset"))
        repo = SqlalchemyUserRepository(session)
        user = make_user("id-1", "ann@x.com")

        created = repo.create(user)

        assert created is user
        session.commit.assert_called_once()
        session.rollback.assert_not_called()
        assert "could not be reloaded" in caplog.text

    def test_seq_increases_with_each_insert(self, user_repo):
        first = user_repo.create(make_user("id-1", "ann@x.com"))
        second = user_repo.create(make_user("id-2", "bob@x.com"))

        assert second.seq > first.seq


class TestQueries:
    def test_find_by_email_not_found(self, user_repo):
        assert user_repo.find_by_email("nobody@x.com") is None

    def test_list_all_in_creation_order_with_teams(self, user_repo, db_session):
        """목록은 생성 순서대로이며, 각 사용자의 소유 팀을 포함합니다."""
        now = datetime.now(timezone.utc)
        user_repo.create(make_user("id-b", "bob@x.com", name="Bob", created_at=now))
        user_repo.create(make_user("id-a", "ann@x.com", name="Ann", created_at=now + timedelta(seconds=1)))
        db_session.add(models.Team(name="Core", owner_id="id-a"))
        db_session.commit()

        users = user_repo.list_all()

        assert [u.id for u in users] == ["id-b", "id-a"]
        assert users[0].created_teams == []
        assert [t.name for t in users[1].created_teams] == ["Core"]

    def test_list_all_keeps_insertion_order_when_created_at_ties(self, user_repo):
        """생성 시각이 같으면 id가 아니라 삽입 순서를 따릅니다."""
        now = datetime.now(timezone.utc)
        user_repo.create(make_user("zzz", "zed@x.com", name="Zed", created_at=now))
        user_repo.create(make_user("aaa", "ann@x.com", name="Ann", created_at=now))

        users = user_repo.list_all()

        assert [u.id for u in users] == ["zzz", "aaa"]

