import time

from jose import jwt, JWTError
from passlib.context import CryptContext

from ..config import settings

# pbkdf2_sha256 — соль + много раундов.
# hex_sha256 — старые хэши без соли (sha256(password).hexdigest()): проверяем и перехэшируем.
pwd = CryptContext(schemes=["pbkdf2_sha256", "hex_sha256"], deprecated=["hex_sha256"])


def create_jwt(payload: dict) -> str:
    exp = int(time.time()) + settings.JWT_TTL_SEC
    return jwt.encode({**payload, "exp": exp}, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def decode_jwt(token: str):
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except JWTError:
        return None


def hash_password(password: str) -> str:
    return pwd.hash(password)


def verify_password(password: str, password_hash: str | None) -> tuple[bool, str | None]:
    """
    (совпал ли пароль, новый хэш если старый пора заменить).
    Нераспознанный формат хэша считаем несовпадением.
    """
    if not password_hash:
        return False, None
    try:
        return pwd.verify_and_update(password, password_hash)
    except ValueError:
        return False, None
