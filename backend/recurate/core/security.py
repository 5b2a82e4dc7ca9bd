from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from recurate.core.config import settings
from recurate.core.exceptions import HashingError

# CryptContext handles password hashing using bcrypt
# bcrypt is slow by design to prevent brute-force attacks; the work factor
# is fixed system-wide through BCRYPT_ROUNDS
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    # bcrypt generates a fresh salt per call and embeds it in the hash
    try:
        return pwd_context.hash(password)
    except (TypeError, ValueError) as e:
        raise HashingError(f"Could not hash password: {e.__class__.__name__}") from e


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    # A malformed or foreign hash is a failed match, not an error
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (TypeError, ValueError):
        return False


def sign_session_token(token: str) -> str:
    """Wrap an opaque session token so the cookie cannot be forged or altered"""
    return jwt.encode({"sid": token}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def read_session_token(cookie_value: Optional[str]) -> Optional[str]:
    """Return the opaque token inside a signed cookie, or None if it doesn't verify"""
    if not cookie_value:
        return None
    try:
        payload = jwt.decode(cookie_value, settings.SECRET_KEY,
                             algorithms=[settings.ALGORITHM])
    except JWTError:
        # Tampered, signed with another secret, or not a JWT at all
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) and sid else None
