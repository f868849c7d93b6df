import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.test import override_settings
from rest_framework.exceptions import NotFound

from LearningHubApp.core.access import STAFF_ROLES, Principal, principal_of, role_allowed
from LearningHubApp.core.apps import check_learninghub_settings
from LearningHubApp.core.choices import UserRole
from LearningHubApp.core.exceptions import api_exception_handler, error_message_for
from LearningHubApp.core.permissions import HasRole


class FakeUser:
    def __init__(self, role, authenticated=True, pk=1):
        self.role = role
        self.is_authenticated = authenticated
        self.pk = pk


class FakeRequest:
    def __init__(self, user):
        self.user = user


class FakeView:
    action = "list"
    error_messages = {"list": "Failed to fetch things"}


@pytest.mark.parametrize("role,roles,expected", [
    (UserRole.TUTOR, STAFF_ROLES, True),
    (UserRole.ADMIN, STAFF_ROLES, True),
    (UserRole.STUDENT, STAFF_ROLES, False),
    (UserRole.STUDENT, [UserRole.STUDENT], True),
])
def test_role_allowed(role, roles, expected):
    assert role_allowed(Principal(id=1, role=role), roles) is expected


def test_principal_of_rejects_anonymous_and_unknown_roles():
    assert principal_of(None) is None
    assert principal_of(FakeUser(UserRole.ADMIN, authenticated=False)) is None
    assert principal_of(FakeUser("guest")) is None
    assert principal_of(FakeUser("tutor", pk=7)) == Principal(id=7, role=UserRole.TUTOR)
    assert role_allowed(None, STAFF_ROLES) is False


def test_has_role_permission():
    perm = HasRole(UserRole.ADMIN)
    assert perm.has_permission(FakeRequest(FakeUser(UserRole.ADMIN)), None) is True
    assert perm.has_permission(FakeRequest(FakeUser(UserRole.TUTOR)), None) is False


def test_error_message_lookup():
    assert error_message_for(FakeView()) == "Failed to fetch things"
    assert error_message_for(None) == "Internal server error"

    class Dashboard:
        error_message = "Failed to fetch dashboard data"

    assert error_message_for(Dashboard()) == "Failed to fetch dashboard data"


@pytest.mark.parametrize("exc,status_code", [
    (NotFound("missing"), 404),
    (DjangoValidationError({"score": ["too high"]}), 400),
    (IntegrityError("duplicate key"), 409),
])
def test_exception_handler_maps_known_errors(exc, status_code):
    response = api_exception_handler(exc, {"view": FakeView()})
    assert response.status_code == status_code


def test_exception_handler_hides_unexpected_errors():
    response = api_exception_handler(RuntimeError("secret detail"), {"view": FakeView()})
    assert response.status_code == 500
    assert response.data == {"error": "Failed to fetch things"}


def test_settings_check_passes_with_defaults():
    assert check_learninghub_settings(None) == []


@override_settings(LEARNINGHUB={
    "ENROLLMENT_KEY_LENGTH": 2,
    "DEFAULT_MAX_SCORE": 0,
    "SUBMISSIONS_PAGE_SIZE": 50,
    "SUBMISSIONS_MAX_PAGE_SIZE": 10,
})
def test_settings_check_reports_bad_values():
    ids = [error.id for error in check_learninghub_settings(None)]
    assert ids == ["core.E002", "core.E003", "core.E004"]
