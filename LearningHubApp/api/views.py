"""REST API views for users, courses, enrollment, assignments, submissions, grades and announcements."""

from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404

from rest_framework import status, mixins, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.request import Request
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from drf_spectacular.utils import (
    extend_schema,
    extend_schema_view,
    OpenApiResponse,
    OpenApiParameter,
)

from LearningHubApp.api.mixins import PaginationMixin, RoleGateMixin
from LearningHubApp.api.pagination import PageLimitPagination
from LearningHubApp.api.throttles import SubmissionRateThrottle
from LearningHubApp.core.access import ADMIN_ROLES, STAFF_ROLES, STUDENT_ROLES, is_staff_member
from LearningHubApp.core.permissions import HasRole, ParticipantPermission
from LearningHubApp.courses.models import Course, Announcement
from LearningHubApp.domain.services import course_service, grading_service, learning_service
from LearningHubApp.learning.models import Assignment, Submission, Grade
from LearningHubApp.api.serializers import (
    RoleTokenObtainPairSerializer,
    UserCreateSerializer,
    UserSerializer,
    CourseWriteSerializer,
    CourseReadSerializer,
    PublishSerializer,
    CopyCourseSerializer,
    BulkEnrollSerializer,
    EnrollUsersSerializer,
    AssignInstructorSerializer,
    SelfEnrollSerializer,
    CourseStatsSerializer,
    EnrollmentSerializer,
    AssignmentWriteSerializer,
    AssignmentReadSerializer,
    DueDateSerializer,
    SubmissionStateSerializer,
    SubmissionWriteSerializer,
    SubmissionFilterSerializer,
    SubmissionReadSerializer,
    GradeReadSerializer,
    GradeCreateSerializer,
    GradeUpdateSerializer,
    AnnouncementSerializer,
    DashboardSerializer,
)

AUTH_RESPONSES = {
    401: OpenApiResponse(description="Authentication required."),
    403: OpenApiResponse(description="Forbidden"),
    404: OpenApiResponse(description="Not Found"),
}

VALIDATION_RESPONSE = {
    400: OpenApiResponse(description="Validation failed."),
}

CONFLICT_RESPONSE = {
    409: OpenApiResponse(description="Conflicting state."),
}

User = get_user_model()


# ---------- Auth ----------
@extend_schema(tags=["Auth"])
class RoleTokenObtainPairView(TokenObtainPairView):
    """Exchange e-mail and password for a JWT pair carrying the caller's role."""
    serializer_class = RoleTokenObtainPairSerializer


# ---------- Users ----------
@extend_schema_view(
    list=extend_schema(tags=["Users"], responses={200: UserSerializer(many=True), **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Users"],
        request=UserCreateSerializer,
        responses={201: UserSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
)
class UserViewSet(mixins.ListModelMixin, mixins.CreateModelMixin, viewsets.GenericViewSet):
    """Account administration (admin only)."""
    queryset = User.objects.order_by("id")
    error_messages = {"list": "Failed to fetch users", "create": "Failed to create user"}

    def get_permissions(self) -> list:
        return [IsAuthenticated(), HasRole(*ADMIN_ROLES)]

    def get_serializer_class(self):
        return UserCreateSerializer if self.action == "create" else UserSerializer

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = UserCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        user = ser.save()
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


# ---------- Courses ----------
COURSE_MANAGE = {"required_roles": ["tutor", "admin"]}


@extend_schema_view(
    list=extend_schema(tags=["Courses"], responses={200: CourseReadSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Courses"], responses={200: CourseReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Courses"],
        request=CourseWriteSerializer,
        responses={201: CourseReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
    partial_update=extend_schema(
        tags=["Courses"],
        request=CourseWriteSerializer,
        responses={200: CourseReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
    mine=extend_schema(tags=["Courses"], responses={200: CourseReadSerializer(many=True), **AUTH_RESPONSES}),
    publish=extend_schema(
        tags=["Course management"], request=PublishSerializer,
        responses={200: CourseReadSerializer, **AUTH_RESPONSES},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
    archive=extend_schema(
        tags=["Course management"], request=None,
        responses={200: CourseReadSerializer, **AUTH_RESPONSES},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
    copy=extend_schema(
        tags=["Course management"], request=CopyCourseSerializer,
        responses={201: CourseReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
    enroll_emails=extend_schema(
        tags=["Enrollment"], request=BulkEnrollSerializer,
        responses={200: CourseReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
    enroll_users=extend_schema(
        tags=["Enrollment"], request=EnrollUsersSerializer,
        responses={200: CourseReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
    assign_instructor=extend_schema(
        tags=["Course management"], request=AssignInstructorSerializer,
        responses={200: CourseReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
    reset_enrollments=extend_schema(
        tags=["Enrollment"], request=None,
        responses={200: CourseReadSerializer, **AUTH_RESPONSES},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
    regenerate_key=extend_schema(
        tags=["Enrollment"], request=None,
        responses={200: CourseReadSerializer, **AUTH_RESPONSES},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
    fix_access=extend_schema(
        tags=["Course management"], request=None,
        description="Rotate the enrollment key and republish the course.",
        responses={200: CourseReadSerializer, **AUTH_RESPONSES},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
    stats=extend_schema(
        tags=["Course management"],
        responses={200: CourseStatsSerializer, **AUTH_RESPONSES},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
    self_enroll=extend_schema(
        tags=["Enrollment"], request=SelfEnrollSerializer,
        responses={201: EnrollmentSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["student"], "ownership": "self"}},
    ),
)
class CourseViewSet(
    RoleGateMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """Course listing, configuration and management actions."""
    queryset = Course.objects.all().select_related("instructor")
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "post", "patch", "head", "options"]
    role_rules = {
        "create": STAFF_ROLES,
        "partial_update": STAFF_ROLES,
        "publish": STAFF_ROLES,
        "archive": STAFF_ROLES,
        "copy": STAFF_ROLES,
        "enroll_emails": STAFF_ROLES,
        "enroll_users": STAFF_ROLES,
        "assign_instructor": STAFF_ROLES,
        "reset_enrollments": STAFF_ROLES,
        "regenerate_key": STAFF_ROLES,
        "fix_access": STAFF_ROLES,
        "stats": STAFF_ROLES,
        "self_enroll": STUDENT_ROLES,
    }
    error_messages = {
        "list": "Failed to fetch courses",
        "mine": "Failed to fetch courses",
        "retrieve": "Failed to fetch course",
        "create": "Failed to create course",
        "partial_update": "Failed to update course",
        "publish": "Failed to toggle publish",
        "archive": "Failed to archive",
        "copy": "Failed to copy course",
        "enroll_emails": "Failed to enroll",
        "enroll_users": "Failed to enroll",
        "assign_instructor": "Failed to assign",
        "reset_enrollments": "Failed to reset",
        "regenerate_key": "Failed to regenerate key",
        "fix_access": "Failed to fix access",
        "stats": "Failed to fetch course statistics",
        "self_enroll": "Failed to enroll in course",
    }

    def get_serializer_class(self):
        if self.action in ("create", "partial_update"):
            return CourseWriteSerializer
        return CourseReadSerializer

    def get_queryset(self):
        """Active courses for the listing; every course for detail routes."""
        qs = Course.objects.select_related("instructor")
        if self.action == "list":
            qs = qs.active()
        return qs.order_by("id")

    def _respond(self, course: Course, code: int = status.HTTP_200_OK) -> Response:
        return Response(CourseReadSerializer(course).data, status=code)

    def create(self, request: Request, *args, **kwargs) -> Response:
        """Create a course and return read representation."""
        ser = CourseWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        course = course_service.create_course(request.user, ser.validated_data)
        return self._respond(course, status.HTTP_201_CREATED)

    def partial_update(self, request: Request, *args, **kwargs) -> Response:
        """Apply configuration changes to a course."""
        course = self.get_object()
        ser = CourseWriteSerializer(course, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        return self._respond(course_service.update_course(request.user, course, ser.validated_data))

    @action(detail=False, methods=["get"])
    def mine(self, request: Request) -> Response:
        """Courses taught by, or enrolled in by, the caller."""
        courses = Course.objects.mine(request.user).select_related("instructor").order_by("id")
        return Response(CourseReadSerializer(courses, many=True).data)

    @action(detail=True, methods=["post"])
    def publish(self, request: Request, pk: int | None = None) -> Response:
        ser = PublishSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        course = course_service.set_published(request.user, self.get_object(), ser.validated_data.get("published"))
        return self._respond(course)

    @action(detail=True, methods=["post"])
    def archive(self, request: Request, pk: int | None = None) -> Response:
        return self._respond(course_service.archive_course(request.user, self.get_object()))

    @action(detail=True, methods=["post"])
    def copy(self, request: Request, pk: int | None = None) -> Response:
        ser = CopyCourseSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        clone = course_service.copy_course(request.user, self.get_object(), ser.validated_data["title"])
        return self._respond(clone, status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="enroll-emails")
    def enroll_emails(self, request: Request, pk: int | None = None) -> Response:
        ser = BulkEnrollSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return self._respond(course_service.bulk_enroll(request.user, self.get_object(), ser.validated_data["emails"]))

    @action(detail=True, methods=["post"], url_path="enroll-users")
    def enroll_users(self, request: Request, pk: int | None = None) -> Response:
        ser = EnrollUsersSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return self._respond(course_service.enroll_users(request.user, self.get_object(), ser.validated_data["user_ids"]))

    @action(detail=True, methods=["post"], url_path="assign-instructor")
    def assign_instructor(self, request: Request, pk: int | None = None) -> Response:
        ser = AssignInstructorSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        instructor = get_object_or_404(User, pk=ser.validated_data["instructor_id"])
        return self._respond(course_service.assign_instructor(request.user, self.get_object(), instructor))

    @action(detail=True, methods=["post"], url_path="reset-enrollments")
    def reset_enrollments(self, request: Request, pk: int | None = None) -> Response:
        return self._respond(course_service.reset_enrollments(request.user, self.get_object()))

    @action(detail=True, methods=["post"], url_path="regenerate-key")
    def regenerate_key(self, request: Request, pk: int | None = None) -> Response:
        return self._respond(course_service.regenerate_enrollment_key(request.user, self.get_object()))

    @action(detail=True, methods=["post"], url_path="fix-access")
    def fix_access(self, request: Request, pk: int | None = None) -> Response:
        return self._respond(course_service.fix_access(request.user, self.get_object()))

    @action(detail=True, methods=["get"])
    def stats(self, request: Request, pk: int | None = None) -> Response:
        return Response(CourseStatsSerializer(course_service.course_stats(self.get_object())).data)

    @action(detail=True, methods=["post"], url_path="self-enroll")
    def self_enroll(self, request: Request, pk: int | None = None) -> Response:
        """Enroll the calling student with the course's enrollment key."""
        ser = SelfEnrollSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        enrollment = course_service.self_enroll(request.user, self.get_object(), ser.validated_data["enrollment_key"])
        return Response(EnrollmentSerializer(enrollment).data, status=status.HTTP_201_CREATED)


# ---------- Enrollments ----------
@extend_schema(
    tags=["Enrollment"],
    request=EnrollmentSerializer,
    responses={201: EnrollmentSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
    extensions={"x-permissions": {"required_roles": ["student"], "ownership": "self"}},
)
class EnrollmentView(APIView):
    """Enroll the calling student in an active course."""
    permission_classes = [IsAuthenticated]
    error_message = "Failed to enroll in course"

    def get_permissions(self) -> list:
        return [IsAuthenticated(), HasRole(*STUDENT_ROLES)]

    def post(self, request: Request) -> Response:
        ser = EnrollmentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        enrollment = course_service.enroll(request.user, ser.validated_data["course"])
        return Response(EnrollmentSerializer(enrollment).data, status=status.HTTP_201_CREATED)


# ---------- Assignments ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Assignments"],
        parameters=[OpenApiParameter("course", int, OpenApiParameter.QUERY, required=False)],
        responses={200: AssignmentReadSerializer(many=True), **AUTH_RESPONSES},
    ),
    retrieve=extend_schema(tags=["Assignments"], responses={200: AssignmentReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Assignments"],
        request=AssignmentWriteSerializer,
        responses={201: AssignmentReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
    update=extend_schema(
        tags=["Assignments"],
        request=DueDateSerializer,
        description="Extend (or clear) the due date.",
        responses={200: AssignmentReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
    state=extend_schema(
        tags=["Assignments"],
        responses={200: SubmissionStateSerializer, **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["student"], "ownership": "self"}},
    ),
)
class AssignmentViewSet(
    RoleGateMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """Assignments of active courses; staff create them and move due dates."""
    queryset = Assignment.objects.select_related("course")
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "post", "put", "head", "options"]
    role_rules = {"create": STAFF_ROLES, "update": STAFF_ROLES, "state": STUDENT_ROLES}
    error_messages = {
        "list": "Failed to fetch assignments",
        "retrieve": "Failed to fetch assignment",
        "create": "Failed to create assignment",
        "update": "Failed to update assignment",
        "state": "Failed to fetch assignment state",
    }

    def get_serializer_class(self):
        if self.action == "create":
            return AssignmentWriteSerializer
        if self.action == "update":
            return DueDateSerializer
        return AssignmentReadSerializer

    def get_queryset(self):
        """Active assignments, optionally restricted to one course."""
        qs = Assignment.objects.select_related("course").active()
        course_id = self.kwargs.get("course_pk") or self.request.query_params.get("course")
        return qs.for_course(course_id).order_by("id")

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = AssignmentWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        course = data.pop("course")
        data["questions"] = [dict(q) for q in data.get("questions", [])]
        assignment = learning_service.create_assignment(request.user, course, data)
        return Response(AssignmentReadSerializer(assignment).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, *args, **kwargs) -> Response:
        """Extend the assignment's due date."""
        assignment = self.get_object()
        ser = DueDateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        updated = learning_service.extend_due_date(request.user, assignment, ser.validated_data["due_date"])
        return Response(AssignmentReadSerializer(updated).data)

    @action(detail=True, methods=["get"])
    def state(self, request: Request, pk: int | None = None) -> Response:
        """Workflow state of this assignment for the calling student."""
        assignment = self.get_object()
        state = learning_service.submission_state(assignment, request.user)
        return Response(SubmissionStateSerializer({"assignment": assignment.pk, "state": state}).data)


# ---------- Submissions ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Submissions"],
        parameters=[
            SubmissionFilterSerializer,
            OpenApiParameter("page", int, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("limit", int, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: SubmissionReadSerializer(many=True), **AUTH_RESPONSES},
    ),
    retrieve=extend_schema(tags=["Submissions"], responses={200: SubmissionReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Submissions"],
        request=SubmissionWriteSerializer,
        description="Submit answers. Auto-graded assignments are graded immediately. Endpoint is rate-limited.",
        responses={
            201: SubmissionReadSerializer,
            429: OpenApiResponse(description="Too many requests / throttled."),
            **AUTH_RESPONSES,
            **VALIDATION_RESPONSE,
            **CONFLICT_RESPONSE,
        },
        extensions={"x-permissions": {"required_roles": ["student"], "ownership": "self"}},
    ),
)
class SubmissionViewSet(
    RoleGateMixin,
    PaginationMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    """Submission creation and paginated, filtered listing."""

    permission_classes = [IsAuthenticated, ParticipantPermission]
    pagination_class = PageLimitPagination
    throttle_classes: list[type] = []
    queryset = Submission.objects.select_related("assignment__course", "student", "grade")
    role_rules = {"create": STUDENT_ROLES}
    error_messages = {
        "list": "Failed to fetch submissions",
        "retrieve": "Failed to fetch submission",
        "create": "Failed to create submission",
    }

    def get_serializer_class(self):
        return SubmissionWriteSerializer if self.action == "create" else SubmissionReadSerializer

    def get_throttles(self):
        """Apply rate throttle only on create."""
        if self.action == "create":
            self.throttle_classes = [SubmissionRateThrottle]
        return super().get_throttles()

    def get_queryset(self):
        """Restrict submissions to the caller unless tutor or admin."""
        return self.queryset.visible_to(self.request.user)

    def list(self, request: Request, *args, **kwargs) -> Response:
        filters = SubmissionFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data
        qs = learning_service.list_submissions(
            request.user,
            assignment_id=params.get("assignment"),
            student_id=params.get("student"),
            course_id=params.get("course"),
            status=params.get("status"),
        )
        return self.paginate_and_respond(qs, SubmissionReadSerializer)

    def create(self, request: Request, *args, **kwargs) -> Response:
        """Create a submission (auto-grading it when applicable)."""
        ser = SubmissionWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        student_id = ser.validated_data.get("student")
        if student_id is not None and student_id != request.user.id:
            raise PermissionDenied("Students can only submit for themselves")
        submission = learning_service.submit(
            request.user,
            ser.validated_data["assignment"],
            ser.validated_data["answers"],
        )
        submission = self.queryset.get(pk=submission.pk)
        return Response(SubmissionReadSerializer(submission).data, status=status.HTTP_201_CREATED)


# ---------- Grades ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Grades"],
        parameters=[
            OpenApiParameter("student", int, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("assignment", int, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: GradeReadSerializer(many=True), **AUTH_RESPONSES},
    ),
    retrieve=extend_schema(tags=["Grades"], responses={200: GradeReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Grades"],
        request=GradeCreateSerializer,
        responses={201: GradeReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE, **CONFLICT_RESPONSE},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
    update=extend_schema(
        tags=["Grades"],
        request=GradeUpdateSerializer,
        responses={200: GradeReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
)
class GradeViewSet(
    RoleGateMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """View grades; staff grade upload submissions and record overrides."""
    queryset = Grade.objects.select_related("submission__assignment__course", "graded_by", "submission__student")
    permission_classes = [IsAuthenticated, ParticipantPermission]
    http_method_names = ["get", "post", "put", "head", "options"]
    role_rules = {"create": STAFF_ROLES, "update": STAFF_ROLES}
    error_messages = {
        "list": "Failed to fetch grades",
        "retrieve": "Failed to fetch grade",
        "create": "Failed to grade submission",
        "update": "Failed to update grade",
    }

    def get_serializer_class(self):
        if self.action == "create":
            return GradeCreateSerializer
        if self.action == "update":
            return GradeUpdateSerializer
        return GradeReadSerializer

    def get_queryset(self):
        qs = self.queryset
        if not is_staff_member(self.request.user):
            qs = qs.filter(submission__student=self.request.user)
        student_id = self.request.query_params.get("student")
        if student_id:
            qs = qs.filter(submission__student_id=student_id)
        assignment_id = self.request.query_params.get("assignment")
        if assignment_id:
            qs = qs.filter(submission__assignment_id=assignment_id)
        return qs.order_by("id")

    def create(self, request: Request, *args, **kwargs) -> Response:
        ser = GradeCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        grade = grading_service.submit_grade(
            request.user,
            data["assignment"],
            data["student"],
            data["score"],
            data.get("max_score"),
            data.get("feedback", ""),
        )
        return Response(GradeReadSerializer(grade).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, *args, **kwargs) -> Response:
        """Record a manual score override and feedback."""
        grade = self.get_object()
        ser = GradeUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        updated = grading_service.update_grade(
            request.user,
            grade,
            manual_score=ser.validated_data.get("manual_score"),
            feedback=ser.validated_data.get("feedback"),
        )
        return Response(GradeReadSerializer(updated).data)


# ---------- Announcements ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Announcements"],
        parameters=[
            OpenApiParameter("course", int, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("is_global", bool, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: AnnouncementSerializer(many=True), **AUTH_RESPONSES},
    ),
    create=extend_schema(
        tags=["Announcements"],
        request=AnnouncementSerializer,
        responses={201: AnnouncementSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": COURSE_MANAGE},
    ),
)
class AnnouncementViewSet(RoleGateMixin, mixins.ListModelMixin, mixins.CreateModelMixin, viewsets.GenericViewSet):
    """Course and global announcements, newest first."""
    serializer_class = AnnouncementSerializer
    permission_classes = [IsAuthenticated]
    role_rules = {"create": STAFF_ROLES}
    error_messages = {"list": "Failed to fetch announcements", "create": "Failed to create announcement"}

    def get_queryset(self):
        course_id = self.kwargs.get("course_pk") or self.request.query_params.get("course")
        global_only = self.request.query_params.get("is_global") == "true"
        return Announcement.objects.select_related("author").feed(course_id, global_only)

    def perform_create(self, serializer) -> None:
        """Posts on the nested route always land in the course named by the URL."""
        extra = {"author": self.request.user}
        if "course_pk" in self.kwargs:
            extra["course"] = get_object_or_404(Course, pk=self.kwargs["course_pk"])
        serializer.save(**extra)


# ---------- Admin ----------
@extend_schema(
    tags=["Admin"],
    responses={200: DashboardSerializer, **AUTH_RESPONSES},
    extensions={"x-permissions": {"required_roles": ["admin"]}},
)
class AdminDashboardView(APIView):
    """Aggregate counts for the admin dashboard."""
    error_message = "Failed to fetch dashboard data"

    def get_permissions(self) -> list:
        return [IsAuthenticated(), HasRole(*ADMIN_ROLES)]

    def get(self, request: Request) -> Response:
        data = {
            "users": User.objects.count(),
            "courses": Course.objects.count(),
            "assignments": Assignment.objects.count(),
            "submissions": Submission.objects.count(),
        }
        return Response(DashboardSerializer(data).data)
