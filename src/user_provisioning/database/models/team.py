from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from ..database import Base


class Team(Base):
    """
    사용자가 생성하여 소유하는 팀입니다.
    팀 자체의 관리는 이 서비스의 범위 밖이며, 사용자 목록 조회 시 id와 name만 노출합니다.
    """
    __tablename__ = "teams"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    owner_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    owner = relationship("User", back_populates="created_teams")
