"""Password hashing (salted PBKDF2-SHA256 via passlib)."""

from typing import Optional

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Verified against when no account matches, so unknown emails cost the same as wrong passwords
_dummy_hash: Optional[str] = None


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    """Constant-time check of ``plain`` against ``hashed``; False for unusable hashes."""
    global _dummy_hash
    if not hashed:
        if _dummy_hash is None:
            _dummy_hash = pwd_context.hash("not-a-real-password")
        pwd_context.verify(plain, _dummy_hash)
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False
