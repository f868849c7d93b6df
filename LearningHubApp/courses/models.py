"""Course domain models: Course, CourseEnrollment, Announcement."""

from django.db import models
from django.conf import settings

from simple_history.models import HistoricalRecords

from LearningHubApp.courses.querysets import CourseQuerySet, AnnouncementQuerySet


User = settings.AUTH_USER_MODEL

class Course(models.Model):
    """A course run by a tutor (instructor), published while `is_active`.

    Fields:
        title / description / department: Descriptive metadata.
        instructor: Tutor responsible for the course (optional).
        is_active: Published flag; only active courses are listed by default.
        is_mandatory: All students are expected to take the course.
        archived: Soft-delete marker; archived courses stay unpublished.
        allow_self_enroll / enrollment_key: Key-based self enrollment (empty key disables it).
        enroll_emails: Enrolled e-mail addresses, kept free of duplicates.
        start_date / end_date: Optional course window.
        notes, ppt_links, resources, attachments, tags, estimated_duration, outline:
            Opaque content metadata owned by the front-end.
        history: Audit history (django-simple-history).
    """
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    department = models.CharField(max_length=120, blank=True)
    instructor = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="taught_courses"
    )
    is_active = models.BooleanField(default=True)
    is_mandatory = models.BooleanField(default=False)
    archived = models.BooleanField(default=False)
    allow_self_enroll = models.BooleanField(default=True)
    enrollment_key = models.CharField(max_length=32, blank=True)
    enroll_emails = models.JSONField(default=list, blank=True)
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    ppt_links = models.JSONField(default=list, blank=True)
    resources = models.JSONField(default=list, blank=True)
    attachments = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    estimated_duration = models.CharField(max_length=64, blank=True)
    outline = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = CourseQuerySet.as_manager()

    def __str__(self) -> str:
        return f"{self.title} (#{self.pk})"


class CourseEnrollment(models.Model):
    """A student's enrollment in a course.

    Constraints:
        uq_enrollment_course_student: one row per (course, student).
    """
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="enrollments")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="course_enrollments")
    enrolled_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["course", "student"], name="uq_enrollment_course_student"),
        ]

    def __str__(self) -> str:
        return f"{self.student} -> {self.course}"


class Announcement(models.Model):
    """A notice posted to one course, or to everyone when `is_global`."""
    course = models.ForeignKey(
        Course, on_delete=models.CASCADE, null=True, blank=True, related_name="announcements"
    )
    title = models.CharField(max_length=200)
    content = models.TextField()
    is_global = models.BooleanField(default=False)
    author = models.ForeignKey(User, on_delete=models.PROTECT, related_name="announcements")
    created_at = models.DateTimeField(auto_now_add=True)

    objects = AnnouncementQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return self.title
