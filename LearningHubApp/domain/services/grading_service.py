"""Grading engine: automatic scoring on submission and manual grading by staff.

Auto-graded assignments are scored immediately after the submission is stored;
upload assignments wait for a tutor or admin. A submission carries at most one
grade and GRADED is terminal, so grading twice is a conflict. Staff may still
record a manual score override and feedback on an existing grade.
"""

import logging
from typing import Any, Mapping

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from LearningHubApp.core.access import STAFF_ROLES, principal_of, role_allowed
from LearningHubApp.core.choices import AssignmentType, GradeStatus
from LearningHubApp.core.conf import get_setting
from LearningHubApp.core.exceptions import Conflict
from LearningHubApp.learning.models import Assignment, Grade, Submission
from LearningHubApp.users.models import User

logger = logging.getLogger(__name__)


def _ensure_staff(user: User) -> None:
    """Ensure user is a tutor or admin."""
    if not role_allowed(principal_of(user), STAFF_ROLES):
        raise PermissionDenied("Tutor or admin role required")


def compute_auto_score(answers: Mapping[str, Any]) -> int:
    """Count answers whose trimmed text is non-empty.

    Answers are not compared with the questions' correct answers.
    """
    return sum(1 for value in answers.values() if isinstance(value, str) and value.strip())


def grade(submission: Submission) -> Grade | None:
    """Auto-grade a fresh submission; upload assignments return None."""
    assignment = submission.assignment
    if assignment.type != AssignmentType.AUTO:
        return None
    score = compute_auto_score(submission.answers or {})
    result = Grade.objects.create(
        submission=submission,
        score=score,
        max_score=assignment.max_score or get_setting("DEFAULT_MAX_SCORE"),
        status=GradeStatus.GRADED,
        graded_at=timezone.now(),
    )
    logger.info("Auto-graded submission %s: %d/%d", submission.pk, result.score, result.max_score)
    return result


def _check_bounds(score: int, max_score: int, field: str = "score") -> None:
    if not (0 <= score <= max_score):
        raise ValidationError({field: f"Must be between 0 and {max_score}."})


@transaction.atomic
def submit_grade(
    grader: User,
    assignment: Assignment,
    student: User,
    score: int,
    max_score: int | None = None,
    feedback: str = "",
) -> Grade:
    """Manually grade the student's submission for an assignment (tutor/admin only).

    Raises:
        PermissionDenied: grader is not staff.
        NotFound: the student has not submitted.
        Conflict: the submission already carries a grade.
        ValidationError: score outside 0..max_score.
    """
    _ensure_staff(grader)
    max_score = max_score or assignment.max_score or get_setting("DEFAULT_MAX_SCORE")
    _check_bounds(score, max_score)
    try:
        submission = Submission.objects.select_for_update().get(assignment=assignment, student=student)
    except Submission.DoesNotExist:
        raise NotFound("Submission not found")
    if Grade.objects.filter(submission=submission).exists():
        raise Conflict("Submission is already graded")
    result = Grade.objects.create(
        submission=submission,
        score=score,
        max_score=max_score,
        status=GradeStatus.GRADED,
        feedback=feedback,
        graded_by=grader,
        graded_at=timezone.now(),
    )
    logger.info("Submission %s graded by %s: %d/%d", submission.pk, grader.pk, score, max_score)
    return result


@transaction.atomic
def update_grade(
    grader: User,
    grade_obj: Grade,
    manual_score: int | None = None,
    feedback: str | None = None,
) -> Grade:
    """Record a manual score override and/or feedback on an existing grade."""
    _ensure_staff(grader)
    grade_obj = Grade.objects.select_for_update().get(pk=grade_obj.pk)
    if manual_score is not None:
        _check_bounds(manual_score, grade_obj.max_score, field="manual_score")
        grade_obj.manual_score = manual_score
    if feedback is not None:
        grade_obj.feedback = feedback
    grade_obj.status = GradeStatus.GRADED
    grade_obj.graded_by = grader
    grade_obj.graded_at = timezone.now()
    grade_obj.save()
    logger.info("Grade %s updated by %s", grade_obj.pk, grader.pk)
    return grade_obj
