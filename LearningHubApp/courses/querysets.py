"""Custom querysets encapsulating listing and role-based filtering for courses and learning objects."""

from django.db.models import QuerySet, Q
from typing import Self

from LearningHubApp.core.choices import UserRole, SubmissionStatusFilter

class CourseQuerySet(QuerySet):
    """QuerySet with helpers for course listing and membership."""

    def active(self) -> Self:
        """Published, non-archived courses (the default listing)."""
        return self.filter(is_active=True, archived=False)

    def taught_by(self, user) -> Self:
        """Courses where the user is the instructor."""
        return self.filter(instructor=user)

    def enrolled(self, user) -> Self:
        """Courses the user has an enrollment record for."""
        return self.filter(enrollments__student=user).distinct()

    def mine(self, user) -> Self:
        """Courses relevant to the user:
        - Admin: every course that is not archived
        - Tutor: courses they instruct
        - Student: courses they are enrolled in
        """
        if not user or not user.is_authenticated:
            return self.none()
        if user.role == UserRole.ADMIN:
            return self.filter(archived=False)
        if user.role == UserRole.TUTOR:
            return self.taught_by(user)
        return self.enrolled(user)


class AnnouncementQuerySet(QuerySet):
    """QuerySet helpers for the announcement feed."""

    def feed(self, course_id=None, global_only: bool = False) -> Self:
        """Announcements of one course and/or global ones, newest first."""
        qs = self
        if course_id:
            qs = qs.filter(course_id=course_id)
        if global_only:
            qs = qs.filter(is_global=True)
        return qs.order_by("-created_at", "-id")


class AssignmentQuerySet(QuerySet):
    """QuerySet helpers for assignments."""

    def active(self) -> Self:
        return self.filter(is_active=True)

    def for_course(self, course_id) -> Self:
        return self.filter(course_id=course_id) if course_id else self


class SubmissionQuerySet(QuerySet):
    """QuerySet helpers for filtering submissions by role and grading status."""

    def visible_to(self, user) -> Self:
        """Students see their own submissions; tutors and admins see all."""
        if getattr(user, "role", None) in (UserRole.TUTOR, UserRole.ADMIN):
            return self
        return self.filter(student_id=getattr(user, "pk", None))

    def with_status(self, status: str | None) -> Self:
        """Filter by derived status: a submission is graded iff a grade row exists."""
        if status == SubmissionStatusFilter.SUBMITTED:
            return self.filter(grade__isnull=True)
        if status == SubmissionStatusFilter.GRADED:
            return self.filter(grade__isnull=False)
        return self

    def for_course(self, course_id) -> Self:
        return self.filter(assignment__course_id=course_id) if course_id else self
