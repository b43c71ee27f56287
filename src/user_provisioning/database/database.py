from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

# 모든 모델 클래스가 상속받을 Base 클래스
Base = declarative_base()


def create_db_engine(database_url: str, timeout: float = 5.0) -> Engine:
    """
    SQLAlchemy 엔진을 생성합니다.

    외부 호출은 항상 시간 제한을 가져야 하므로, SQLite는 busy timeout을,
    그 외 DB는 커넥션 풀 대기 시간을 timeout 값으로 제한합니다.
    """
    if database_url.startswith("sqlite"):
        # connect_args의 check_same_thread는 SQLite에서만 필요합니다. (thread-safe 설정)
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": timeout},
        )
    return create_engine(database_url, pool_timeout=timeout, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    # autocommit=False, autoflush=False로 설정하여, 명시적으로 commit을 호출해야 DB에 반영됩니다.
    # expire_on_commit=False: commit 이후 다시 조회하지 못해도 저장된 값으로 응답할 수 있어야 합니다.
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
