"""
Authentication module.

This module handles user registration, login and profile management.
"""

from .models import User
from .schemas import LoginResponse, Token, UserCreate, UserLogin, UserResponse, UserUpdate

__all__ = [
    "User",
    "Token",
    "LoginResponse",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "UserUpdate",
]
