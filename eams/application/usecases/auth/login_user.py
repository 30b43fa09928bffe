"""
===============================================================================
USE CASE: Login User
===============================================================================

Class:
    LoginUserUseCase

Responsibilities:
    - Look the user up by exact email.
    - Issue an access token carrying the user's id, email and current role.

Collaborators:
    - UserRepository.get_user_by_email
    - identity.tokens.TokenCodec

Rules:
    - Unknown email -> UnknownIdentity.
    - No password, freshness or revocation check.
===============================================================================
"""

from __future__ import annotations

import logging

from ....domain.faults import Fault, FaultKind
from ....domain.repositories import UserRepository
from ....identity.tokens import TokenCodec
from .auth_results import LoginResult

logger = logging.getLogger(__name__)


class LoginUserUseCase:
    def __init__(self, user_repository: UserRepository, codec: TokenCodec) -> None:
        self._users = user_repository
        self._codec = codec

    def execute(self, email: str) -> LoginResult:
        user = self._users.get_user_by_email(email)
        if user is None:
            return LoginResult(
                error=Fault(FaultKind.UNKNOWN_IDENTITY, "Invalid email")
            )

        issued = self._codec.issue_with_expiry(str(user.id), user.email, user.role)
        logger.info("user logged in", extra={"user_id": str(user.id)})
        return LoginResult(access_token=issued.token, expires_in=issued.expires_in)
