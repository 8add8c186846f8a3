import logging
from datetime import timedelta
from coopledger.core.config import settings
from coopledger.core.security import verify_pin, create_access_token, ADMIN_SUBJECT

logger = logging.getLogger(__name__)


def authenticate_pin(pin: str) -> bool:
    """Check the admin PIN gate."""
    if not verify_pin(pin):
        logger.debug("PIN verification failed")
        return False
    logger.debug("PIN verified successfully")
    return True


def create_access_token_for_admin() -> str:
    """Create a JWT access token for the admin session."""
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return create_access_token(
        data={"sub": ADMIN_SUBJECT},
        expires_delta=access_token_expires
    )
