from pydantic import BaseModel, EmailStr, SecretStr
from datetime import datetime


class LoginRequest(BaseModel):
    email: EmailStr
    password: SecretStr


class Session(BaseModel):
    token: str
    email: str
    created_at: datetime
    expires_at: datetime
