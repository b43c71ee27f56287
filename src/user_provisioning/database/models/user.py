import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.orm import relationship
from ..database import Base


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    USER = "USER"


def _utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    """
    이 애플리케이션이 보관하는 사용자 레코드입니다.
    id는 외부 Identity Provider가 발급한 값을 그대로 사용하며, DB는 id를 생성하지 않습니다.
    비밀번호는 단방향 해시로만 저장됩니다.
    """
    __tablename__ = "users"
    id = Column(String, primary_key=True)
    name = Column(String(50), nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(Enum(Role, name="user_role"), nullable=False, default=Role.USER)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    # 삽입 순서. INSERT 시점에 저장소가 max(seq) + 1로 채웁니다.
    seq = Column(Integer, unique=True, nullable=False, index=True)

    created_teams = relationship("Team", back_populates="owner", cascade="all, delete-orphan", order_by="Team.id")
