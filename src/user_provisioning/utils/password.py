# src/user_provisioning/utils/password.py
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

# 호출마다 임의의 salt를 생성하여 해시 문자열에 함께 저장합니다.
_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Argon2id 해시를 생성합니다."""
    return _hasher.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    """저장된 해시와 입력된 비밀번호를 비교합니다."""
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False
