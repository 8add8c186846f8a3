from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
import bcrypt
import hmac
from coopledger.core.config import settings

ADMIN_SUBJECT = "admin"


def verify_pin(pin: str, expected: Optional[str] = None) -> bool:
    """
    Verify the admin PIN.

    The configured PIN may be stored either plain (e.g. "2025") or as a
    bcrypt hash ("$2b$..."), so deployments can avoid keeping it in clear text.
    """
    expected = settings.ADMIN_PIN if expected is None else expected
    if not pin or not expected:
        return False

    if expected.startswith("$2"):
        try:
            return bcrypt.checkpw(pin.encode('utf-8'), expected.encode('utf-8'))
        except ValueError:
            return False

    return hmac.compare_digest(pin.encode('utf-8'), expected.encode('utf-8'))


def get_pin_hash(pin: str) -> str:
    """Hash a PIN for storage in ADMIN_PIN."""
    return bcrypt.hashpw(pin.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and verify a JWT token."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        return None
