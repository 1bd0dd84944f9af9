"""
Pydantic schemas cho authentication.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

BCRYPT_MAX_BYTES = 72


class RegisterRequest(BaseModel):
    """Schema cho request đăng ký."""
    email: EmailStr = Field(..., description="Email")
    password: str = Field(..., min_length=6, max_length=72, description="Password (tối thiểu 6 ký tự)")
    display_name: Optional[str] = Field(None, max_length=100, description="Tên hiển thị")

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator('password')
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password không được dài quá {BCRYPT_MAX_BYTES} bytes")
        return v

    @field_validator('display_name')
    @classmethod
    def strip_display_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class LoginRequest(BaseModel):
    """Schema cho request đăng nhập."""
    email: str = Field(..., description="Email")
    password: str = Field(..., description="Password")


class UserResponse(BaseModel):
    """Schema cho response thông tin user."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    created_at: datetime
    last_login: Optional[datetime] = None


class AuthResponse(BaseModel):
    """Schema cho response sau khi đăng nhập/đăng ký thành công."""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class ErrorResponse(BaseModel):
    """Schema cho error response."""
    detail: str
