# File: app/schemas/user.py
from datetime import datetime
from typing import Optional
from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator
from app.models.user import UserRole

class UserCreate(BaseModel):
    email: str = Field(max_length=255)
    name: Optional[str] = Field(default=None, max_length=120)
    image: Optional[str] = Field(default=None, max_length=500)
    has_password: bool = False

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        # stored as sent; email-validator's normalized form would not match the token claim
        v = v.strip()
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(f"value is not a valid email address: {e}")
        return v

class UserOut(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    image: Optional[str] = None
    role: UserRole
    premium: bool
    is_blocked: bool
    has_password: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class UserCreateResult(BaseModel):
    message: str
    inserted_id: Optional[int] = None
    user: UserOut

class RolePatch(BaseModel):
    role: UserRole

class BlockPatch(BaseModel):
    is_blocked: bool

class ProfilePatch(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    image: Optional[str] = Field(default=None, max_length=500)
