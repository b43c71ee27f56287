from .user import IUserRepository

__all__ = ["IUserRepository"]
