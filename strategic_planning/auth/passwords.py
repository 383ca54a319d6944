"""Password hashing primitive."""

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(plain: str) -> str:
    """Hash a plain-text password."""
    return pwd_context.hash(plain)


def verify_password(plain: str, digest: str) -> bool:
    """Compare a plain-text password against a stored digest."""
    if not plain or not digest:
        return False
    try:
        return pwd_context.verify(plain, digest)
    except ValueError:
        # Unrecognized or corrupt digest
        return False
