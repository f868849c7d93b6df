import pytest
from django.core.cache import cache
from rest_framework.test import APIClient
from model_bakery import baker

from LearningHubApp.core.choices import AssignmentType, UserRole


@pytest.fixture(autouse=True)
def clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


def make_user(role: str, email: str | None = None):
    extra = {"email": email} if email else {}
    user = baker.make("users.User", role=role, **extra)
    user.set_password("pass1234")
    user.save()
    return user


def client_for(user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def admin():
    return make_user(UserRole.ADMIN, "admin@example.com")


@pytest.fixture
def tutor():
    return make_user(UserRole.TUTOR, "tutor@example.com")


@pytest.fixture
def student():
    return make_user(UserRole.STUDENT, "student@example.com")


@pytest.fixture
def course(tutor):
    return baker.make("courses.Course", title="Intro", instructor=tutor, is_active=True)


@pytest.fixture
def auto_assignment(course):
    return baker.make(
        "learning.Assignment",
        course=course,
        type=AssignmentType.AUTO,
        max_score=100,
        is_active=True,
        due_date=None,
        questions=[
            {"text": "2+2?", "choices": ["3", "4"], "correct_answer": "4"},
            {"text": "Capital of France?", "choices": ["Paris", "Rome"], "correct_answer": "Paris"},
        ],
    )


@pytest.fixture
def upload_assignment(course):
    return baker.make(
        "learning.Assignment",
        course=course,
        type=AssignmentType.UPLOAD,
        max_score=50,
        is_active=True,
        due_date=None,
    )


@pytest.fixture
def api():
    """Return an APIClient authenticated as the given user."""
    return client_for


@pytest.fixture
def user_factory():
    return make_user
