"""Authentication use cases (register / login)."""

from .auth_results import LoginResult, RegisterUserResult
from .login_user import LoginUserUseCase
from .register_user import RegisterUserUseCase

__all__ = [
    "LoginResult",
    "LoginUserUseCase",
    "RegisterUserResult",
    "RegisterUserUseCase",
]
