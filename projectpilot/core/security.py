"""
Password hashing
"""
from passlib.context import CryptContext

from projectpilot.config import settings


pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__default_rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)
