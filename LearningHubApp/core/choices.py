"""Typed enumerations (TextChoices) for user roles, assignment types and grading states."""
from django.db import models

class UserRole(models.TextChoices):
    """System-level role assigned to a user account."""
    STUDENT = "student", "Student"
    TUTOR = "tutor", "Tutor"
    ADMIN = "admin", "Admin"

class AssignmentType(models.TextChoices):
    """Grading path of an assignment: auto-graded MCQ or manually graded upload."""
    AUTO = "auto", "Auto-graded"
    UPLOAD = "upload", "Upload"

class SubmissionState(models.TextChoices):
    """Lifecycle of an assignment for one student."""
    NOT_SUBMITTED = "not_submitted", "Not submitted"
    SUBMITTED = "submitted", "Submitted"
    GRADED = "graded", "Graded"

class GradeStatus(models.TextChoices):
    GRADED = "graded", "Graded"

class SubmissionStatusFilter(models.TextChoices):
    """Values accepted by the `status` filter of the submission listing."""
    ALL = "all", "All"
    SUBMITTED = "submitted", "Submitted"
    GRADED = "graded", "Graded"
