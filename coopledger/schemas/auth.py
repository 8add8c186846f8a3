from pydantic import BaseModel, Field


class PinLogin(BaseModel):
    pin: str = Field(..., min_length=4, max_length=4, pattern=r"^\d{4}$")


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SessionResponse(BaseModel):
    authenticated: bool = True
    subject: str
    society_name: str
