# src/user_provisioning/config.py
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from user_provisioning.database.models import Role

DEFAULT_DATABASE_URL = "sqlite:///user_provisioning.db"


@dataclass(frozen=True)
class Settings:
    """애플리케이션 전체 설정. 환경 변수(.env 포함)에서 한 번 읽어 주입합니다."""

    identity_provider_url: str
    identity_provider_anon_key: str
    identity_provider_service_key: str
    identity_provider_timeout: float = 10.0
    database_url: str = DEFAULT_DATABASE_URL
    database_timeout: float = 5.0
    # 자가 가입(POST /users) 시 요청 본문의 role과 무관하게 부여되는 역할
    self_registration_role: Role = Role.ADMIN
    log_level: str = "INFO"
    host: str = ""
    port: int = 8000


def _require(env: dict, key: str) -> str:
    value = env.get(key)
    if not value:
        raise ValueError(f"Missing required configuration value: {key}")
    return value


def _parse_role(value: Optional[str]) -> Role:
    if not value:
        return Role.ADMIN
    try:
        return Role(value.upper())
    except ValueError:
        raise ValueError(f"SELF_REGISTRATION_ROLE must be one of {[r.value for r in Role]}, got '{value}'.")


def load_settings(env: Optional[dict] = None) -> Settings:
    """
    환경 변수로부터 Settings를 생성합니다.

    Args:
        env: 테스트 등에서 사용할 환경 변수 딕셔너리. 생략하면 .env 파일을 읽은 뒤 os.environ을 사용합니다.

    Raises:
        ValueError: 필수 값이 없거나 형식이 잘못되었을 때.
    """
    if env is None:
        load_dotenv()
        env = dict(os.environ)

    return Settings(
        identity_provider_url=_require(env, "IDENTITY_PROVIDER_URL").rstrip("/"),
        identity_provider_anon_key=_require(env, "IDENTITY_PROVIDER_ANON_KEY"),
        identity_provider_service_key=_require(env, "IDENTITY_PROVIDER_SERVICE_KEY"),
        identity_provider_timeout=float(env.get("IDENTITY_PROVIDER_TIMEOUT", 10.0)),
        database_url=env.get("DATABASE_URL") or DEFAULT_DATABASE_URL,
        database_timeout=float(env.get("DATABASE_TIMEOUT", 5.0)),
        self_registration_role=_parse_role(env.get("SELF_REGISTRATION_ROLE")),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
        host=env.get("HOST", ""),
        port=int(env.get("PORT", 8000)),
    )
