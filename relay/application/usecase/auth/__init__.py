"""Authentication use cases."""

from .begin_login import BeginLoginResponse, BeginLoginUseCase
from .complete_login import (
    CompleteLoginRequest,
    CompleteLoginResponse,
    CompleteLoginUseCase,
)

__all__ = [
    "BeginLoginResponse",
    "BeginLoginUseCase",
    "CompleteLoginRequest",
    "CompleteLoginResponse",
    "CompleteLoginUseCase",
]
