"""Role & object access helpers."""

from dataclasses import dataclass
from typing import Any, Iterable

from LearningHubApp.learning.models import Submission, Grade
from LearningHubApp.core.choices import UserRole

STAFF_ROLES = frozenset({UserRole.TUTOR, UserRole.ADMIN})
STUDENT_ROLES = frozenset({UserRole.STUDENT})
ADMIN_ROLES = frozenset({UserRole.ADMIN})


@dataclass(frozen=True)
class Principal:
    """Verified caller identity handed to the role gate."""
    id: int
    role: UserRole


def principal_of(user: Any) -> Principal | None:
    if not user or not getattr(user, "is_authenticated", False):
        return None
    try:
        role = UserRole(user.role)
    except ValueError:
        return None
    return Principal(id=user.pk, role=role)


def role_allowed(principal: Principal | None, roles: Iterable[str]) -> bool:
    """True when the principal's role is one of `roles`."""
    return principal is not None and principal.role in frozenset(roles)


def is_staff_member(user) -> bool:
    return role_allowed(principal_of(user), STAFF_ROLES)


def is_submission_participant(user, obj: Any) -> bool:
    """User owns the submission / grade, or is a tutor or admin."""
    if is_staff_member(user):
        return True
    if isinstance(obj, Submission):
        return obj.student_id == user.id
    if isinstance(obj, Grade):
        return obj.submission.student_id == user.id
    return False
