from .sqlalchemy_user_repository import SqlalchemyUserRepository

__all__ = ["SqlalchemyUserRepository"]
