from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from coopledger.core.config import settings
from coopledger.core.security import decode_access_token, ADMIN_SUBJECT

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


async def get_current_admin(token: str = Depends(oauth2_scheme)) -> str:
    """Get the authenticated session subject from the JWT token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    subject = payload.get("sub")
    if subject != ADMIN_SUBJECT:
        raise credentials_exception

    return subject


def require_feature(flag_name: str):
    """Dependency factory for endpoints behind a settings feature flag."""
    async def feature_checker():
        if not getattr(settings, flag_name, False):
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Feature disabled: {flag_name}"
            )
    return feature_checker


require_ai_chat = require_feature("ENABLE_AI_CHAT")
require_document_upload = require_feature("ENABLE_DOCUMENT_UPLOAD")
