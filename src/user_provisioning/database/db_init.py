import logging

from sqlalchemy.engine import Engine

from .database import Base
from . import models  # noqa: F401  모든 모델을 메타데이터에 등록

logger = logging.getLogger("user_provisioning.database")


def initialize_db(engine: Engine) -> None:
    """
    모든 테이블을 생성합니다. (이미 존재하면 생성하지 않음)
    """
    logger.info("Creating tables on %s", engine.url.render_as_string(hide_password=True))
    Base.metadata.create_all(bind=engine)
    logger.info("Tables ready.")
