"""Auth domain schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class AuthStatusResponse(BaseModel):
    connected: bool
    email: Optional[str] = None
    name: Optional[str] = None
    message: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool
    redirect_to_oauth: bool = False
    message: str


class LogoutResponse(BaseModel):
    success: bool
    message: str
