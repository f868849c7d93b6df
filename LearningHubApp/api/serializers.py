"""Serializers for users, courses, enrollment actions, assignments, submissions, grades and announcements."""

from rest_framework import serializers
from django.contrib.auth import get_user_model
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from LearningHubApp.courses.models import Course, CourseEnrollment, Announcement
from LearningHubApp.learning.models import Assignment, Submission, Grade
from LearningHubApp.core.choices import AssignmentType, SubmissionState, SubmissionStatusFilter, UserRole

User = get_user_model()


class WireAliasMixin:
    """Accept the camelCase wire names listed in `wire_aliases` (alias -> field name).

    The field name wins when a payload carries both spellings.
    """
    wire_aliases: dict[str, str] = {}

    def to_internal_value(self, data):
        if hasattr(data, "keys") and any(alias in data for alias in self.wire_aliases):
            renamed = {self.wire_aliases[key]: data[key] for key in data.keys() if key in self.wire_aliases}
            data = renamed | {key: data[key] for key in data.keys() if key not in self.wire_aliases}
        return super().to_internal_value(data)


class RoleTokenObtainPairSerializer(TokenObtainPairSerializer):
    """JWT pair whose access token also carries the caller's role."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role
        return token


class UserCreateSerializer(serializers.ModelSerializer):
    """Serializer used by admins to create accounts."""
    password = serializers.CharField(write_only=True, help_text="User password (write‑only).")

    class Meta:
        model = User
        fields = ["id", "email", "password", "first_name", "last_name", "role"]

    def create(self, validated: dict) -> User:
        """Create and return a new user instance."""
        user = User(
            email=validated["email"],
            first_name=validated.get("first_name", ""),
            last_name=validated.get("last_name", ""),
            role=validated["role"],
            username=validated["email"],
        )
        user.set_password(validated["password"])
        user.save()
        return user


class UserSerializer(serializers.ModelSerializer):
    """Public, safe representation of a user."""
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name", "role", "display_name"]


# ---------- Courses ----------
COURSE_CONTENT_FIELDS = [
    "notes", "ppt_links", "resources", "attachments", "tags", "estimated_duration", "outline",
]


class CourseWriteSerializer(serializers.ModelSerializer):
    """Serializer for creating/configuring a course."""
    instructor = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(role=UserRole.TUTOR), required=False, allow_null=True
    )
    enroll_emails = serializers.ListField(child=serializers.EmailField(), required=False)

    class Meta:
        model = Course
        fields = [
            "title", "description", "department", "instructor", "is_mandatory",
            "allow_self_enroll", "enrollment_key", "enroll_emails", "start_date", "end_date",
            *COURSE_CONTENT_FIELDS,
        ]

    def validate(self, data):
        start = data.get("start_date", getattr(self.instance, "start_date", None))
        end = data.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "End date must not precede start date."})
        return super().validate(data)


class CourseReadSerializer(serializers.ModelSerializer):
    """Serializer for reading course details including instructor."""
    instructor = UserSerializer(read_only=True)

    class Meta:
        model = Course
        fields = [
            "id", "title", "description", "department", "instructor", "is_active", "is_mandatory",
            "archived", "allow_self_enroll", "enrollment_key", "enroll_emails", "start_date", "end_date",
            *COURSE_CONTENT_FIELDS, "created_at", "updated_at",
        ]


class PublishSerializer(serializers.Serializer):
    published = serializers.BooleanField(required=False, allow_null=True, default=None,
                                         help_text="Target state; omit to toggle.")


class CopyCourseSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)


class BulkEnrollSerializer(serializers.Serializer):
    emails = serializers.CharField(help_text="Comma or newline separated e-mail addresses.")


class EnrollUsersSerializer(serializers.Serializer):
    user_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)


class AssignInstructorSerializer(serializers.Serializer):
    instructor_id = serializers.IntegerField()


class SelfEnrollSerializer(serializers.Serializer):
    enrollment_key = serializers.CharField()


class CourseStatsSerializer(serializers.Serializer):
    enrolled = serializers.IntegerField()
    enrollment_records = serializers.IntegerField()
    assignments = serializers.IntegerField()
    submissions = serializers.IntegerField()
    graded = serializers.IntegerField()


class EnrollmentSerializer(WireAliasMixin, serializers.ModelSerializer):
    """Enrollment record; the student is always the caller."""
    wire_aliases = {"courseId": "course"}

    class Meta:
        model = CourseEnrollment
        fields = ["id", "course", "student", "enrolled_at"]
        read_only_fields = ["id", "student", "enrolled_at"]


# ---------- Assignments ----------
class QuestionSerializer(serializers.Serializer):
    text = serializers.CharField(allow_blank=True)
    image_url = serializers.URLField(required=False, allow_blank=True, allow_null=True)
    choices = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    correct_answer = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AssignmentWriteSerializer(serializers.ModelSerializer):
    """Serializer for creating assignments."""
    questions = QuestionSerializer(many=True, required=False)
    attachments = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = Assignment
        fields = ["course", "title", "instructions", "type", "questions", "attachments", "due_date", "max_score"]

    def validate(self, data):
        if data.get("type", AssignmentType.AUTO) == AssignmentType.AUTO:
            for index, question in enumerate(data.get("questions", [])):
                answer = question.get("correct_answer")
                if answer and answer not in question.get("choices", []):
                    raise serializers.ValidationError(
                        {"questions": f"Question {index + 1}: correct answer must be one of its choices."}
                    )
        return super().validate(data)


class DueDateSerializer(WireAliasMixin, serializers.Serializer):
    wire_aliases = {"dueDate": "due_date"}
    due_date = serializers.DateTimeField(allow_null=True)


class AssignmentReadSerializer(serializers.ModelSerializer):
    """Serializer for reading assignment details."""

    class Meta:
        model = Assignment
        fields = [
            "id", "course", "title", "instructions", "type", "questions", "attachments",
            "due_date", "max_score", "is_active", "created_at", "updated_at",
        ]


class SubmissionStateSerializer(serializers.Serializer):
    assignment = serializers.IntegerField()
    state = serializers.ChoiceField(choices=SubmissionState.choices)


# ---------- Submissions & grades ----------
class GradeMiniSerializer(serializers.ModelSerializer):
    """Compact grade representation attached to a submission."""

    class Meta:
        model = Grade
        fields = ["id", "score", "max_score", "manual_score", "feedback", "status", "graded_at"]


class SubmissionWriteSerializer(WireAliasMixin, serializers.Serializer):
    """Body of a submission: the answers keyed by question identifier."""
    wire_aliases = {"assignmentId": "assignment", "studentId": "student"}
    assignment = serializers.PrimaryKeyRelatedField(queryset=Assignment.objects.all())
    student = serializers.IntegerField(required=False,
                                       help_text="Optional; must match the caller when given.")
    answers = serializers.DictField(
        child=serializers.CharField(allow_blank=True, trim_whitespace=False),
        allow_empty=True,
    )


class SubmissionFilterSerializer(WireAliasMixin, serializers.Serializer):
    wire_aliases = {"assignmentId": "assignment", "studentId": "student", "courseId": "course"}
    assignment = serializers.IntegerField(required=False)
    student = serializers.IntegerField(required=False)
    course = serializers.IntegerField(required=False)
    status = serializers.ChoiceField(choices=SubmissionStatusFilter.choices, required=False,
                                     default=SubmissionStatusFilter.ALL)


class SubmissionReadSerializer(serializers.ModelSerializer):
    """Detailed submission view including grade and student."""
    grade = GradeMiniSerializer(read_only=True)
    student = UserSerializer(read_only=True)
    status = serializers.CharField(source="state", read_only=True)

    class Meta:
        model = Submission
        fields = ["id", "assignment", "student", "answers", "submitted_at", "is_late", "status", "grade"]
        read_only_fields = fields


class GradeReadSerializer(serializers.ModelSerializer):
    """Serializer for reading a grade."""
    graded_by = UserSerializer(read_only=True)
    assignment = serializers.IntegerField(source="submission.assignment_id", read_only=True)
    student = serializers.IntegerField(source="submission.student_id", read_only=True)
    final_score = serializers.IntegerField(read_only=True)

    class Meta:
        model = Grade
        fields = [
            "id", "submission", "assignment", "student", "score", "max_score", "manual_score",
            "final_score", "status", "feedback", "graded_by", "graded_at", "created_at", "updated_at",
        ]


class GradeCreateSerializer(WireAliasMixin, serializers.Serializer):
    """Manual grading of a student's submission for an assignment."""
    wire_aliases = {"assignmentId": "assignment", "studentId": "student", "maxScore": "max_score"}
    assignment = serializers.PrimaryKeyRelatedField(queryset=Assignment.objects.all())
    student = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    score = serializers.IntegerField(min_value=0)
    max_score = serializers.IntegerField(min_value=1, required=False)
    feedback = serializers.CharField(required=False, allow_blank=True, default="")


class GradeUpdateSerializer(WireAliasMixin, serializers.Serializer):
    wire_aliases = {"manualScore": "manual_score"}
    manual_score = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    feedback = serializers.CharField(required=False, allow_blank=True, allow_null=True)


# ---------- Announcements ----------
class AnnouncementSerializer(serializers.ModelSerializer):
    author = UserSerializer(read_only=True)

    class Meta:
        model = Announcement
        fields = ["id", "course", "title", "content", "is_global", "author", "created_at"]
        read_only_fields = ["id", "author", "created_at"]

    def validate(self, data):
        view = self.context.get("view")
        nested = "course_pk" in getattr(view, "kwargs", {})
        if not nested and not data.get("course") and not data.get("is_global"):
            raise serializers.ValidationError("An announcement needs a course or must be global.")
        return super().validate(data)


class DashboardSerializer(serializers.Serializer):
    users = serializers.IntegerField()
    courses = serializers.IntegerField()
    assignments = serializers.IntegerField()
    submissions = serializers.IntegerField()
