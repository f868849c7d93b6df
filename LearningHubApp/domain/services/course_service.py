"""Domain service functions for course lifecycle and enrollment management.

These helpers encapsulate business rules (e.g., only tutors/admins manage a
course, enrollment e-mails never hold duplicates) and keep view/serializer
layers thin. Mutations of `enroll_emails` lock the course row inside a
transaction so concurrent enrollments cannot drop each other's updates.
"""
import logging
import re
import string
from typing import Any, Iterable

from django.db import transaction
from django.utils.crypto import get_random_string
from rest_framework.exceptions import PermissionDenied, ValidationError

from LearningHubApp.core.access import STAFF_ROLES, STUDENT_ROLES, principal_of, role_allowed
from LearningHubApp.core.choices import UserRole
from LearningHubApp.core.conf import get_setting
from LearningHubApp.core.exceptions import Conflict
from LearningHubApp.courses.models import Course, CourseEnrollment
from LearningHubApp.learning.models import Assignment, Grade, Submission
from LearningHubApp.users.models import User

logger = logging.getLogger(__name__)

EMAIL_SEPARATORS = re.compile(r"[,\n]")
KEY_ALPHABET = string.ascii_uppercase + string.digits
COPY_EXCLUDED_FIELDS = {"id", "created_at", "updated_at", "enroll_emails"}


def _ensure_staff(user: User) -> None:
    """Raise PermissionDenied if user is neither a tutor nor an admin."""
    if not role_allowed(principal_of(user), STAFF_ROLES):
        raise PermissionDenied("Tutor or admin role required")


def parse_email_list(text: str) -> list[str]:
    """Split a comma/newline separated list, trimming entries and dropping blanks."""
    return [part.strip() for part in EMAIL_SEPARATORS.split(text or "") if part.strip()]


def merge_emails(existing: Iterable[str], incoming: Iterable[str]) -> list[str]:
    """Union of two e-mail lists without duplicates (exact, case-sensitive match).

    Existing entries keep their order and come first.
    """
    return list(dict.fromkeys([*existing, *incoming]))


def generate_enrollment_key(length: int | None = None) -> str:
    """Random uppercase alphanumeric enrollment key."""
    return get_random_string(length or get_setting("ENROLLMENT_KEY_LENGTH"), allowed_chars=KEY_ALPHABET)


def _locked(course: Course) -> Course:
    return Course.objects.select_for_update().get(pk=course.pk)


def _add_emails(course: Course, emails: Iterable[str]) -> Course:
    locked = _locked(course)
    locked.enroll_emails = merge_emails(locked.enroll_emails or [], emails)
    locked.save(update_fields=["enroll_emails", "updated_at"])
    return locked


@transaction.atomic
def create_course(actor: User, data: dict[str, Any]) -> Course:
    """Create a course; a tutor creating a course becomes its instructor.

    Args:
        actor: Tutor or admin creating the course.
        data: Validated payload for the Course model.

    Returns:
        The newly created Course instance.
    """
    _ensure_staff(actor)
    data = dict(data)
    if "enroll_emails" in data:
        data["enroll_emails"] = merge_emails([], data["enroll_emails"])
    if data.get("instructor") is None and actor.role == UserRole.TUTOR:
        data["instructor"] = actor
    course = Course.objects.create(**data)
    logger.info("Course %s created by %s", course.pk, actor.pk)
    return course


@transaction.atomic
def update_course(actor: User, course: Course, data: dict[str, Any]) -> Course:
    """Apply configuration changes (dates, flags, key, content) to a course."""
    _ensure_staff(actor)
    locked = _locked(course)
    for field, value in data.items():
        setattr(locked, field, value)
    if "enroll_emails" in data:
        locked.enroll_emails = merge_emails([], locked.enroll_emails)
    locked.save()
    return locked


@transaction.atomic
def enroll(student: User, course: Course) -> CourseEnrollment:
    """Create the enrollment record of a student in an active course (idempotent)."""
    if not role_allowed(principal_of(student), STUDENT_ROLES):
        raise PermissionDenied("Student role required")
    if not course.is_active:
        raise PermissionDenied("Course is not open for enrollment")
    enrollment, created = CourseEnrollment.objects.get_or_create(course=course, student=student)
    if created:
        logger.info("Student %s enrolled in course %s", student.pk, course.pk)
    return enrollment


@transaction.atomic
def self_enroll(student: User, course: Course, key: str) -> CourseEnrollment:
    """Enroll a student who presents the course's current enrollment key.

    Raises:
        PermissionDenied: self enrollment disabled, course inactive, or wrong key.
    """
    locked = _locked(course)
    if not locked.allow_self_enroll or not locked.enrollment_key:
        raise PermissionDenied("Self enrollment is disabled for this course")
    if key != locked.enrollment_key:
        raise PermissionDenied("Invalid enrollment key")
    enrollment = enroll(student, locked)
    _add_emails(locked, [student.email])
    return enrollment


@transaction.atomic
def bulk_enroll(actor: User, course: Course, emails_text: str) -> Course:
    """Enroll a comma/newline separated list of e-mail addresses."""
    _ensure_staff(actor)
    emails = parse_email_list(emails_text)
    if not emails:
        raise ValidationError({"emails": "Enter at least one email."})
    updated = _add_emails(course, emails)
    logger.info("Bulk enrolled %d address(es) in course %s", len(emails), course.pk)
    return updated


@transaction.atomic
def enroll_users(actor: User, course: Course, user_ids: Iterable[int]) -> Course:
    """Enroll selected users by resolving their ids to e-mail addresses."""
    _ensure_staff(actor)
    ids = list(user_ids)
    if not ids:
        raise ValidationError({"user_ids": "Select at least one user."})
    by_id = dict(User.objects.filter(pk__in=ids).values_list("pk", "email"))
    emails = [by_id[pk] for pk in ids if by_id.get(pk)]
    updated = _add_emails(course, emails)
    logger.info("Enrolled %d user(s) in course %s", len(emails), course.pk)
    return updated


@transaction.atomic
def assign_instructor(actor: User, course: Course, instructor: User) -> Course:
    """Make a tutor the instructor of the course."""
    _ensure_staff(actor)
    if instructor.role != UserRole.TUTOR:
        raise ValidationError({"instructor_id": "Instructor must be a tutor."})
    locked = _locked(course)
    locked.instructor = instructor
    locked.save(update_fields=["instructor", "updated_at"])
    logger.info("Course %s instructor set to %s", course.pk, instructor.pk)
    return locked


@transaction.atomic
def set_published(actor: User, course: Course, published: bool | None = None) -> Course:
    """Publish or unpublish a course; toggles when `published` is None."""
    _ensure_staff(actor)
    locked = _locked(course)
    target = (not locked.is_active) if published is None else published
    if target and locked.archived:
        raise Conflict("Archived courses cannot be republished")
    locked.is_active = target
    locked.save(update_fields=["is_active", "updated_at"])
    logger.info("Course %s is_active=%s", course.pk, locked.is_active)
    return locked


@transaction.atomic
def archive_course(actor: User, course: Course) -> Course:
    """Soft-delete: unpublish and mark archived. There is no way back."""
    _ensure_staff(actor)
    locked = _locked(course)
    locked.is_active = False
    locked.archived = True
    locked.save(update_fields=["is_active", "archived", "updated_at"])
    logger.info("Course %s archived by %s", course.pk, actor.pk)
    return locked


@transaction.atomic
def copy_course(actor: User, course: Course, title: str) -> Course:
    """Create a new course from an existing one with a new title and no enrollments."""
    _ensure_staff(actor)
    if not title.strip():
        raise ValidationError({"title": "Enter a name for the copy."})
    values = {
        field.attname: getattr(course, field.attname)
        for field in Course._meta.concrete_fields
        if field.name not in COPY_EXCLUDED_FIELDS
    }
    values.update(title=title, enroll_emails=[])
    clone = Course.objects.create(**values)
    logger.info("Course %s copied to %s", course.pk, clone.pk)
    return clone


@transaction.atomic
def reset_enrollments(actor: User, course: Course) -> Course:
    """Remove every enrolled e-mail address from the course."""
    _ensure_staff(actor)
    locked = _locked(course)
    locked.enroll_emails = []
    locked.save(update_fields=["enroll_emails", "updated_at"])
    logger.warning("Enrollments of course %s reset by %s", course.pk, actor.pk)
    return locked


@transaction.atomic
def regenerate_enrollment_key(actor: User, course: Course) -> Course:
    """Rotate the course's enrollment key."""
    _ensure_staff(actor)
    locked = _locked(course)
    locked.enrollment_key = generate_enrollment_key()
    locked.save(update_fields=["enrollment_key", "updated_at"])
    return locked


@transaction.atomic
def fix_access(actor: User, course: Course) -> Course:
    """Rotate the enrollment key and republish the course."""
    _ensure_staff(actor)
    locked = _locked(course)
    if locked.archived:
        raise Conflict("Archived courses cannot be republished")
    locked.enrollment_key = generate_enrollment_key()
    locked.is_active = True
    locked.save(update_fields=["enrollment_key", "is_active", "updated_at"])
    logger.info("Access fixed for course %s", course.pk)
    return locked


def course_stats(course: Course) -> dict[str, int]:
    """Counts shown on the course monitoring tab."""
    return {
        "enrolled": len(course.enroll_emails or []),
        "enrollment_records": CourseEnrollment.objects.filter(course=course).count(),
        "assignments": Assignment.objects.filter(course=course).count(),
        "submissions": Submission.objects.filter(assignment__course=course).count(),
        "graded": Grade.objects.filter(submission__assignment__course=course).count(),
    }
