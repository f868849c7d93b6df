"""Domain service functions for assignments, submissions and the per-student workflow.

Enforces role rules:
- Only tutors/admins create assignments or move due dates.
- Only students submit, once per assignment.
State transitions per (assignment, student):
    NOT_SUBMITTED -> SUBMITTED (on submission) -> GRADED (auto-grade or manual grade).
GRADED is terminal. Late submissions are accepted and flagged `is_late`.
"""

import logging
from datetime import datetime
from typing import Any

from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied

from LearningHubApp.core.access import STAFF_ROLES, STUDENT_ROLES, principal_of, role_allowed
from LearningHubApp.core.choices import SubmissionState
from LearningHubApp.core.exceptions import Conflict
from LearningHubApp.courses.models import Course
from LearningHubApp.domain.services import grading_service
from LearningHubApp.learning.models import Assignment, Submission
from LearningHubApp.users.models import User

logger = logging.getLogger(__name__)


def _ensure_staff(user: User) -> None:
    """Ensure user is a tutor or admin."""
    if not role_allowed(principal_of(user), STAFF_ROLES):
        raise PermissionDenied("Tutor or admin role required")

def _ensure_student(user: User) -> None:
    """Ensure user is a student."""
    if not role_allowed(principal_of(user), STUDENT_ROLES):
        raise PermissionDenied("Student role required")

@transaction.atomic
def create_assignment(actor: User, course: Course, data: dict[str, Any]) -> Assignment:
    """Create an assignment in a course (tutor/admin only)."""
    _ensure_staff(actor)
    assignment = Assignment.objects.create(course=course, **data)
    logger.info("Assignment %s (%s) created in course %s", assignment.pk, assignment.type, course.pk)
    return assignment

@transaction.atomic
def extend_due_date(actor: User, assignment: Assignment, due_date: datetime | None) -> Assignment:
    """Move (or clear) an assignment's due date.

    Existing submissions get their `is_late` flag recomputed by the post-save signal.
    """
    _ensure_staff(actor)
    previous = assignment.due_date
    assignment.due_date = due_date
    assignment.save(update_fields=["due_date", "updated_at"])
    logger.info("Assignment %s due date %s -> %s", assignment.pk, previous, due_date)
    return assignment

@transaction.atomic
def submit(student: User, assignment: Assignment, answers: dict[str, str]) -> Submission:
    """Record a student's submission and auto-grade it when the assignment allows.

    Rules:
        - Caller must be a student.
        - Assignment must be active.
        - One submission per (assignment, student); a second one is a Conflict.
    The submission insert and the auto-grade insert commit together.
    """
    _ensure_student(student)
    if not assignment.is_active:
        raise PermissionDenied("Assignment inactive")

    if Submission.objects.filter(assignment=assignment, student=student).exists():
        raise Conflict("Assignment already submitted")

    now = timezone.now()
    try:
        with transaction.atomic():
            submission = Submission.objects.create(
                assignment=assignment,
                student=student,
                answers=answers,
                is_late=bool(assignment.due_date and now > assignment.due_date),
            )
    except IntegrityError:
        raise Conflict("Assignment already submitted")
    logger.info("Student %s submitted assignment %s", student.pk, assignment.pk)
    grading_service.grade(submission)
    return submission

def submission_state(assignment: Assignment, student: User) -> SubmissionState:
    """Workflow state of an assignment for one student."""
    submission = (
        Submission.objects.filter(assignment=assignment, student=student)
        .select_related("grade")
        .first()
    )
    if submission is None:
        return SubmissionState.NOT_SUBMITTED
    return SubmissionState(submission.state)

def list_submissions(
    user: User,
    assignment_id: int | None = None,
    student_id: int | None = None,
    course_id: int | None = None,
    status: str | None = None,
) -> QuerySet[Submission]:
    """Submissions visible to the user, filtered and ordered newest first."""
    qs = (
        Submission.objects.select_related("assignment__course", "student", "grade")
        .visible_to(user)
        .for_course(course_id)
        .with_status(status)
    )
    if assignment_id:
        qs = qs.filter(assignment_id=assignment_id)
    if student_id:
        qs = qs.filter(student_id=student_id)
    return qs.order_by("-submitted_at", "-id")
