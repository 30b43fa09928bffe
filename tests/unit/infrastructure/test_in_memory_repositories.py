"""
Unit tests for the in-memory repositories and the DB pool guard rails.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

import pytest

from eams.domain.absences import AbsenceRequest, AbsenceStatus
from eams.identity.users import User, UserRole
from eams.infrastructure.db import get_pool
from eams.crosscutting.exceptions import PoolNotInitializedError

pytestmark = pytest.mark.unit

T0 = datetime(2025, 9, 1, tzinfo=timezone.utc)


def _user(email: str) -> User:
    return User(id=uuid4(), name="Ann", email=email, role=UserRole.EMPLOYEE)


def _absence(owner: str, created_at: datetime = T0, reason: str = "Vacation"):
    return AbsenceRequest(
        id=uuid4(),
        reason=reason,
        start_date=date(2025, 9, 1),
        end_date=date(2025, 9, 5),
        status=AbsenceStatus.PENDING,
        employee_id=owner,
        created_at=created_at,
    )


class TestInMemoryUserRepository:
    def test_add_and_lookup(self, user_repository):
        user = _user("ann@x.com")

        assert user_repository.add_user(user) is True
        assert user_repository.get_user_by_email("ann@x.com") == user
        assert user_repository.count_users() == 1

    def test_duplicate_email_is_refused(self, user_repository):
        user_repository.add_user(_user("ann@x.com"))

        assert user_repository.add_user(_user("ann@x.com")) is False
        assert user_repository.count_users() == 1

    def test_unknown_email(self, user_repository):
        assert user_repository.get_user_by_email("nobody@x.com") is None

    def test_concurrent_registration_keeps_one(self, user_repository):
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(
                pool.map(
                    lambda _: user_repository.add_user(_user("ann@x.com")), range(16)
                )
            )

        assert results.count(True) == 1
        assert user_repository.count_users() == 1


class TestInMemoryAbsenceRepository:
    def test_add_and_get(self, absence_repository):
        absence = _absence("u-1")
        absence_repository.add_absence(absence)

        assert absence_repository.get_absence(absence.id) == absence
        assert absence_repository.get_absence(uuid4()) is None

    def test_list_orders_newest_first(self, absence_repository):
        for minutes, reason in [(0, "old"), (10, "new"), (5, "mid")]:
            absence_repository.add_absence(
                _absence("u-1", T0 + timedelta(minutes=minutes), reason)
            )

        items = absence_repository.list_absences()

        assert [a.reason for a in items] == ["new", "mid", "old"]

    def test_ties_break_by_insertion_newest_first(self, absence_repository):
        absence_repository.add_absence(_absence("u-1", reason="first"))
        absence_repository.add_absence(_absence("u-1", reason="second"))

        items = absence_repository.list_absences()

        assert [a.reason for a in items] == ["second", "first"]

    def test_owner_scope_and_paging(self, absence_repository):
        for i in range(3):
            absence_repository.add_absence(
                _absence("u-1", T0 + timedelta(minutes=i), f"mine-{i}")
            )
        absence_repository.add_absence(_absence("u-2", reason="theirs"))

        page = absence_repository.list_absences(employee_id="u-1", offset=1, limit=1)

        assert [a.reason for a in page] == ["mine-1"]
        assert absence_repository.count_absences(employee_id="u-1") == 3
        assert absence_repository.count_absences(employee_id="u-2") == 1
        assert absence_repository.count_absences() == 4

    def test_update_status_compare_and_set(self, absence_repository):
        absence = _absence("u-1")
        absence_repository.add_absence(absence)

        updated = absence_repository.update_status(
            absence.id,
            expected=AbsenceStatus.PENDING,
            new_status=AbsenceStatus.APPROVED,
        )
        again = absence_repository.update_status(
            absence.id,
            expected=AbsenceStatus.PENDING,
            new_status=AbsenceStatus.REJECTED,
        )

        assert updated.status == AbsenceStatus.APPROVED
        assert again is None
        stored = absence_repository.get_absence(absence.id)
        assert stored.status == AbsenceStatus.APPROVED

    def test_update_status_unknown_id(self, absence_repository):
        assert (
            absence_repository.update_status(
                uuid4(),
                expected=AbsenceStatus.PENDING,
                new_status=AbsenceStatus.APPROVED,
            )
            is None
        )

    def test_concurrent_decisions_single_winner(self, absence_repository):
        absence = _absence("u-1")
        absence_repository.add_absence(absence)
        targets = [AbsenceStatus.APPROVED, AbsenceStatus.REJECTED] * 8

        def decide(status):
            return absence_repository.update_status(
                absence.id, expected=AbsenceStatus.PENDING, new_status=status
            )

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = [r for r in pool.map(decide, targets) if r is not None]

        assert len(results) == 1
        assert absence_repository.get_absence(absence.id).status == results[0].status


def test_pool_must_be_initialized_before_use():
    with pytest.raises(PoolNotInitializedError):
        get_pool()
