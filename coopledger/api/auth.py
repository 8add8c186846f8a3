from fastapi import APIRouter, Depends, HTTPException, status
from coopledger.schemas.auth import PinLogin, Token, SessionResponse
from coopledger.services.auth import authenticate_pin, create_access_token_for_admin
from coopledger.core.dependencies import get_current_admin
from coopledger.core.config import settings
from coopledger.core.audit import write_audit_log

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=Token)
def login(credentials: PinLogin):
    """Exchange the 4-digit admin PIN for a JWT token."""
    if not authenticate_pin(credentials.pin):
        write_audit_log(actor="anonymous", action="Login failed")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect PIN"
        )

    access_token = create_access_token_for_admin()
    write_audit_log(actor="admin", action="Login")
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/logout")
def logout(current_admin: str = Depends(get_current_admin)):
    """Record logout in audit log (token invalidation is handled client-side)."""
    write_audit_log(actor=current_admin, action="Logout")
    return {"message": "Logged out"}


@router.get("/me", response_model=SessionResponse)
def get_session(current_admin: str = Depends(get_current_admin)):
    """Validate the current token."""
    return SessionResponse(subject=current_admin, society_name=settings.SOCIETY_NAME)
