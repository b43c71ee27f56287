from .user import Role, User
from .team import Team

__all__ = ["Role", "User", "Team"]
