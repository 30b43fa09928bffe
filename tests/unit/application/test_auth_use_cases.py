"""
Unit tests for RegisterUserUseCase and LoginUserUseCase.
"""

from unittest.mock import Mock

import pytest

from eams.application.usecases.auth import LoginUserUseCase, RegisterUserUseCase
from eams.domain.faults import FaultKind
from eams.domain.repositories import UserRepository
from eams.identity.users import UserRole

pytestmark = pytest.mark.unit


class TestRegisterUser:
    def test_creates_user(self, user_repository, clock):
        use_case = RegisterUserUseCase(user_repository, clock=clock)

        result = use_case.execute("Ann", "ann@x.com", UserRole.EMPLOYEE)

        assert result.error is None
        assert result.user.email == "ann@x.com"
        assert result.user.role == UserRole.EMPLOYEE
        assert result.user.created_at == clock()
        assert user_repository.get_user_by_email("ann@x.com") == result.user

    def test_duplicate_email(self, user_repository):
        use_case = RegisterUserUseCase(user_repository)
        use_case.execute("Ann", "ann@x.com", UserRole.EMPLOYEE)

        result = use_case.execute("Ann Again", "ann@x.com", UserRole.ADMIN)

        assert result.user is None
        assert result.error.kind == FaultKind.DUPLICATE_IDENTITY
        assert result.error.message == "Email already exists"
        assert user_repository.count_users() == 1

    def test_email_is_case_sensitive(self, user_repository):
        use_case = RegisterUserUseCase(user_repository)

        first = use_case.execute("Ann", "ann@x.com", UserRole.EMPLOYEE)
        second = use_case.execute("Ann", "ANN@x.com", UserRole.EMPLOYEE)

        assert first.error is None
        assert second.error is None
        assert user_repository.count_users() == 2

    def test_lost_insert_race_is_duplicate(self):
        repo = Mock(spec=UserRepository)
        repo.get_user_by_email.return_value = None
        repo.add_user.return_value = False

        result = RegisterUserUseCase(repo).execute(
            "Ann", "ann@x.com", UserRole.EMPLOYEE
        )

        assert result.error.kind == FaultKind.DUPLICATE_IDENTITY
        repo.add_user.assert_called_once()


class TestLoginUser:
    def test_issues_token_for_known_email(self, user_repository, codec):
        registered = RegisterUserUseCase(user_repository).execute(
            "Boss", "boss@x.com", UserRole.ADMIN
        )

        result = LoginUserUseCase(user_repository, codec).execute("boss@x.com")

        assert result.error is None
        assert result.expires_in == 7 * 24 * 3600
        identity = codec.verify(result.access_token)
        assert identity.subject_id == str(registered.user.id)
        assert identity.email == "boss@x.com"
        assert identity.role == UserRole.ADMIN

    def test_unknown_email(self, user_repository, codec):
        result = LoginUserUseCase(user_repository, codec).execute("nobody@x.com")

        assert result.access_token is None
        assert result.error.kind == FaultKind.UNKNOWN_IDENTITY
        assert result.error.message == "Invalid email"

    def test_login_is_exact_match(self, user_repository, codec):
        RegisterUserUseCase(user_repository).execute(
            "Ann", "ann@x.com", UserRole.EMPLOYEE
        )

        result = LoginUserUseCase(user_repository, codec).execute("Ann@x.com")

        assert result.error.kind == FaultKind.UNKNOWN_IDENTITY
