"""Learning domain models: Assignment, Submission, Grade."""

from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator

from LearningHubApp.courses.models import Course
from LearningHubApp.core.choices import AssignmentType, GradeStatus, SubmissionState
from LearningHubApp.courses.querysets import AssignmentQuerySet, SubmissionQuerySet

from simple_history.models import HistoricalRecords

User = settings.AUTH_USER_MODEL

class Assignment(models.Model):
    """Work set in a course; `type` decides between auto-grading and manual grading.

    `questions` is an ordered list of {"text", "image_url", "choices", "correct_answer"}.
    """
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="assignments")
    title = models.CharField(max_length=255)
    instructions = models.TextField(blank=True)
    type = models.CharField(max_length=16, choices=AssignmentType.choices, default=AssignmentType.AUTO)
    questions = models.JSONField(default=list, blank=True)
    attachments = models.JSONField(default=list, blank=True)
    due_date = models.DateTimeField(null=True, blank=True)
    max_score = models.PositiveIntegerField(default=100, validators=[MinValueValidator(1)])
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = AssignmentQuerySet.as_manager()

    def __str__(self) -> str:
        return f"{self.title} ({self.type})"


class Submission(models.Model):
    """A student's answers for an assignment (unique per assignment+student)."""
    assignment = models.ForeignKey(Assignment, on_delete=models.CASCADE, related_name="submissions")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="submissions")
    answers = models.JSONField(default=dict, blank=True)
    submitted_at = models.DateTimeField(auto_now_add=True)
    is_late = models.BooleanField(default=False)
    history = HistoricalRecords()

    objects = SubmissionQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["assignment", "student"], name="uq_assignment_student"),
        ]

    @property
    def state(self) -> str:
        return SubmissionState.GRADED if hasattr(self, "grade") else SubmissionState.SUBMITTED


class Grade(models.Model):
    """The evaluation of a submission; its existence marks the submission as graded."""
    submission = models.OneToOneField(Submission, on_delete=models.CASCADE, related_name="grade")
    score = models.PositiveIntegerField()
    max_score = models.PositiveIntegerField(default=100)
    status = models.CharField(max_length=16, choices=GradeStatus.choices, default=GradeStatus.GRADED)
    manual_score = models.PositiveIntegerField(null=True, blank=True)
    feedback = models.TextField(blank=True)
    graded_by = models.ForeignKey(
        User, on_delete=models.PROTECT, null=True, blank=True, related_name="assigned_grades"
    )
    graded_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    @property
    def final_score(self) -> int:
        return self.manual_score if self.manual_score is not None else self.score
