"""Custom DRF permission classes for role gating and submission/grade access control."""

from rest_framework.request import Request
from typing import Any

from rest_framework.permissions import BasePermission

from LearningHubApp.core.access import principal_of, role_allowed, is_submission_participant


class HasRole(BasePermission):
    """Allow the request only when the caller's system role is in `roles`."""
    message = "Insufficient permissions"

    def __init__(self, *roles: str) -> None:
        self.roles = frozenset(roles)

    def has_permission(self, request: Request, view: Any) -> bool:
        return role_allowed(principal_of(request.user), self.roles)


class ParticipantPermission(BasePermission):
    """Unified participant permission for Submission and Grade objects."""

    def has_object_permission(self, request: Request, view: Any, obj: Any) -> bool:
        return is_submission_participant(request.user, obj)
