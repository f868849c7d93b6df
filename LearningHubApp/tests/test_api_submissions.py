import pytest
from model_bakery import baker

from LearningHubApp.core.choices import AssignmentType
from LearningHubApp.learning.models import Assignment, Grade, Submission

pytestmark = pytest.mark.django_db

SUBMISSIONS_URL = "/api/v1/submissions/"


def test_submission_listing_paginates(tutor, upload_assignment, api):
    baker.make(Submission, assignment=upload_assignment, _quantity=45)
    client = api(tutor)

    first = client.get(SUBMISSIONS_URL, {"page": 1, "limit": 20})
    assert first.status_code == 200
    assert len(first.data["items"]) == 20
    assert first.data["total"] == 45
    assert first.data["page"] == 1
    assert first.data["limit"] == 20

    last = client.get(SUBMISSIONS_URL, {"page": 3, "limit": 20})
    assert len(last.data["items"]) == 5
    assert last.data["total"] == 45


def test_submission_listing_filters_by_status(tutor, auto_assignment, upload_assignment, user_factory, api):
    learner = user_factory("student")
    baker.make(Submission, assignment=upload_assignment, student=learner)
    graded = baker.make(Submission, assignment=auto_assignment, student=learner)
    baker.make(Grade, submission=graded, score=1, max_score=100)
    client = api(tutor)

    resp = client.get(SUBMISSIONS_URL, {"status": "graded"})
    assert [item["id"] for item in resp.data["items"]] == [graded.id]
    assert resp.data["items"][0]["status"] == "graded"
    resp = client.get(SUBMISSIONS_URL, {"status": "submitted"})
    assert resp.data["total"] == 1
    assert resp.data["items"][0]["status"] == "submitted"
    assert client.get(SUBMISSIONS_URL, {"status": "bogus"}).status_code == 400


def test_student_sees_only_own_submissions(student, upload_assignment, user_factory, api):
    mine = baker.make(Submission, assignment=upload_assignment, student=student)
    other = baker.make(Submission, assignment=upload_assignment, student=user_factory("student"))
    client = api(student)
    resp = client.get(SUBMISSIONS_URL)
    assert [item["id"] for item in resp.data["items"]] == [mine.id]
    assert client.get(f"{SUBMISSIONS_URL}{other.id}/").status_code == 404


def test_submit_auto_assignment_is_graded(student, auto_assignment, api):
    client = api(student)
    resp = client.post(
        SUBMISSIONS_URL,
        {"assignment": auto_assignment.id, "answers": {"q1": "x", "q2": ""}},
        format="json",
    )
    assert resp.status_code == 201
    assert resp.data["status"] == "graded"
    assert resp.data["grade"]["score"] == 1
    assert resp.data["is_late"] is False

    state = client.get(f"/api/v1/assignments/{auto_assignment.id}/state/")
    assert state.data == {"assignment": auto_assignment.id, "state": "graded"}

    again = client.post(
        SUBMISSIONS_URL, {"assignment": auto_assignment.id, "answers": {"q1": "y"}}, format="json"
    )
    assert again.status_code == 409


def test_submit_for_someone_else_is_forbidden(student, tutor, upload_assignment, api):
    resp = api(student).post(
        SUBMISSIONS_URL,
        {"assignment": upload_assignment.id, "student": tutor.id, "answers": {"essay": "x"}},
        format="json",
    )
    assert resp.status_code == 403
    assert not Submission.objects.exists()


def test_tutor_cannot_submit(tutor, upload_assignment, api):
    resp = api(tutor).post(
        SUBMISSIONS_URL, {"assignment": upload_assignment.id, "answers": {"essay": "x"}}, format="json"
    )
    assert resp.status_code == 403


def test_manual_grading_flow(student, tutor, upload_assignment, api):
    api(student).post(
        SUBMISSIONS_URL, {"assignment": upload_assignment.id, "answers": {"essay": "text"}}, format="json"
    )
    client = api(tutor)
    payload = {"assignment": upload_assignment.id, "student": student.id, "score": 40, "feedback": "Good"}

    created = client.post("/api/v1/grades/", payload, format="json")
    assert created.status_code == 201
    assert created.data["score"] == 40
    assert created.data["max_score"] == 50
    assert created.data["graded_by"]["id"] == tutor.id

    assert client.post("/api/v1/grades/", payload, format="json").status_code == 409

    updated = client.put(
        f"/api/v1/grades/{created.data['id']}/", {"manual_score": 45, "feedback": "Better"}, format="json"
    )
    assert updated.status_code == 200
    assert updated.data["final_score"] == 45
    assert updated.data["feedback"] == "Better"

    too_high = client.put(f"/api/v1/grades/{created.data['id']}/", {"manual_score": 51}, format="json")
    assert too_high.status_code == 400


def test_students_cannot_grade(student, upload_assignment, api):
    baker.make(Submission, assignment=upload_assignment, student=student)
    resp = api(student).post(
        "/api/v1/grades/",
        {"assignment": upload_assignment.id, "student": student.id, "score": 50},
        format="json",
    )
    assert resp.status_code == 403
    assert not Grade.objects.exists()


def test_grade_for_missing_submission_is_404(student, tutor, upload_assignment, api):
    resp = api(tutor).post(
        "/api/v1/grades/",
        {"assignment": upload_assignment.id, "student": student.id, "score": 5},
        format="json",
    )
    assert resp.status_code == 404


def test_student_grade_listing_is_scoped(student, upload_assignment, user_factory, api):
    own = baker.make(Grade, submission__assignment=upload_assignment, submission__student=student, score=1)
    baker.make(Grade, submission__assignment=upload_assignment, submission__student=user_factory("student"))
    resp = api(student).get("/api/v1/grades/")
    assert [g["id"] for g in resp.data] == [own.id]


def test_create_assignment_and_extend_due_date(tutor, course, api):
    client = api(tutor)
    created = client.post(
        "/api/v1/assignments/",
        {
            "course": course.id,
            "title": "Quiz 1",
            "type": AssignmentType.AUTO,
            "questions": [{"text": "2+2?", "choices": ["3", "4"], "correct_answer": "4"}],
        },
        format="json",
    )
    assert created.status_code == 201
    assert created.data["max_score"] == 100

    moved = client.put(
        f"/api/v1/assignments/{created.data['id']}/", {"due_date": "2030-01-01T12:00:00Z"}, format="json"
    )
    assert moved.status_code == 200
    assert moved.data["due_date"].startswith("2030-01-01T12:00:00")

    nested = client.get(f"/api/v1/courses/{course.id}/assignments/")
    assert [a["id"] for a in nested.data] == [created.data["id"]]


def test_auto_assignment_answer_must_be_a_choice(tutor, course, api):
    resp = api(tutor).post(
        "/api/v1/assignments/",
        {
            "course": course.id,
            "title": "Quiz",
            "type": AssignmentType.AUTO,
            "questions": [{"text": "2+2?", "choices": ["3", "4"], "correct_answer": "5"}],
        },
        format="json",
    )
    assert resp.status_code == 400
    assert not Assignment.objects.exists()


def test_students_cannot_create_assignments(student, course, api):
    resp = api(student).post("/api/v1/assignments/", {"course": course.id, "title": "x"}, format="json")
    assert resp.status_code == 403


def test_inactive_assignments_are_hidden(student, course, api):
    baker.make(Assignment, course=course, is_active=False)
    active = baker.make(Assignment, course=course, is_active=True)
    resp = api(student).get("/api/v1/assignments/", {"course": course.id})
    assert [a["id"] for a in resp.data] == [active.id]


def test_announcements_feed(tutor, student, course, api):
    staff = api(tutor)
    staff.post("/api/v1/announcements/", {"course": course.id, "title": "First", "content": "a"}, format="json")
    staff.post("/api/v1/announcements/", {"title": "Everyone", "content": "b", "is_global": True}, format="json")
    staff.post(f"/api/v1/courses/{course.id}/announcements/",
               {"course": course.id, "title": "Second", "content": "c"}, format="json")

    reader = api(student)
    assert [a["title"] for a in reader.get("/api/v1/announcements/").data] == ["Second", "Everyone", "First"]
    assert [a["title"] for a in reader.get("/api/v1/announcements/", {"is_global": "true"}).data] == ["Everyone"]
    nested = reader.get(f"/api/v1/courses/{course.id}/announcements/")
    assert [a["title"] for a in nested.data] == ["Second", "First"]

    orphan = staff.post("/api/v1/announcements/", {"title": "Nowhere", "content": "d"}, format="json")
    assert orphan.status_code == 400
    denied = reader.post("/api/v1/announcements/", {"title": "x", "content": "y", "is_global": True}, format="json")
    assert denied.status_code == 403


def test_page_past_the_end_is_empty_not_missing(tutor, upload_assignment, api):
    baker.make(Submission, assignment=upload_assignment, _quantity=5)
    resp = api(tutor).get(SUBMISSIONS_URL, {"page": 2, "limit": 20})
    assert resp.status_code == 200
    assert resp.data == {"items": [], "total": 5, "page": 2, "limit": 20}


def test_camel_case_filters_and_bodies(tutor, student, course, upload_assignment, api):
    other_course = baker.make("courses.Course", instructor=tutor)
    other_assignment = baker.make(Assignment, course=other_course, type=AssignmentType.UPLOAD)
    baker.make(Submission, assignment=other_assignment)

    created = api(student).post(
        SUBMISSIONS_URL,
        {"assignmentId": upload_assignment.id, "studentId": student.id, "answers": {"essay": "x"}},
        format="json",
    )
    assert created.status_code == 201
    assert created.data["assignment"] == upload_assignment.id

    client = api(tutor)
    listing = client.get(SUBMISSIONS_URL, {"courseId": course.id})
    assert listing.data["total"] == 1
    assert listing.data["items"][0]["id"] == created.data["id"]
    assert client.get(SUBMISSIONS_URL, {"studentId": student.id}).data["total"] == 1

    grade = client.post(
        "/api/v1/grades/",
        {"assignmentId": upload_assignment.id, "studentId": student.id, "score": 30},
        format="json",
    )
    assert grade.status_code == 201
    updated = client.put(f"/api/v1/grades/{grade.data['id']}/", {"manualScore": 35}, format="json")
    assert updated.data["manual_score"] == 35

    moved = client.put(
        f"/api/v1/assignments/{upload_assignment.id}/", {"dueDate": "2031-05-01T08:00:00Z"}, format="json"
    )
    assert moved.status_code == 200
    assert moved.data["due_date"].startswith("2031-05-01T08:00:00")


def test_submission_create_is_throttled(student, course, api, monkeypatch):
    from LearningHubApp.api.throttles import SubmissionRateThrottle

    monkeypatch.setitem(SubmissionRateThrottle.THROTTLE_RATES, "submission_create", "2/hour")
    assignments = baker.make(Assignment, course=course, type=AssignmentType.UPLOAD, is_active=True, _quantity=3)
    client = api(student)
    codes = [
        client.post(SUBMISSIONS_URL, {"assignment": a.id, "answers": {"essay": "x"}}, format="json").status_code
        for a in assignments
    ]
    assert codes == [201, 201, 429]
    assert Submission.objects.count() == 2
    assert client.get(SUBMISSIONS_URL).status_code == 200
    assert client.get(SUBMISSIONS_URL).status_code == 200


def test_nested_announcement_stays_in_url_course(tutor, course, api):
    elsewhere = baker.make("courses.Course", instructor=tutor)
    client = api(tutor)
    moved = client.post(
        f"/api/v1/courses/{course.id}/announcements/",
        {"course": elsewhere.id, "title": "Mine", "content": "x"},
        format="json",
    )
    assert moved.status_code == 201
    assert moved.data["course"] == course.id
    bare = client.post(f"/api/v1/courses/{course.id}/announcements/", {"title": "Bare", "content": "y"}, format="json")
    assert bare.status_code == 201
    assert bare.data["course"] == course.id
    assert client.get(f"/api/v1/courses/{elsewhere.id}/announcements/").data == []
