import re

import pytest
from hypothesis import given, strategies as st
from model_bakery import baker
from rest_framework.exceptions import PermissionDenied, ValidationError

from LearningHubApp.core.choices import UserRole
from LearningHubApp.core.exceptions import Conflict
from LearningHubApp.courses.models import Course, CourseEnrollment
from LearningHubApp.domain.services import course_service

emails = st.lists(st.sampled_from(["a@x.io", "b@x.io", "B@x.io", "c@x.io", " d@x.io"]), max_size=12)


@given(existing=emails, incoming=emails)
def test_merge_emails_is_a_duplicate_free_union(existing, incoming):
    merged = course_service.merge_emails(existing, incoming)
    assert len(merged) == len(set(merged))
    assert set(merged) == set(existing) | set(incoming)


@given(st.text(alphabet="ab@., \n\t", max_size=40))
def test_parse_email_list_yields_trimmed_non_empty_entries(text):
    for entry in course_service.parse_email_list(text):
        assert entry and entry == entry.strip()
        assert "," not in entry and "\n" not in entry


def test_parse_email_list_mixed_separators():
    text = "a@x.io, b@x.io\n\nc@x.io ,"
    assert course_service.parse_email_list(text) == ["a@x.io", "b@x.io", "c@x.io"]


def test_merge_emails_is_case_sensitive_and_keeps_existing_order():
    assert course_service.merge_emails(["b@x.io", "a@x.io"], ["A@x.io", "a@x.io"]) == ["b@x.io", "a@x.io", "A@x.io"]


def test_generated_key_is_uppercase_alphanumeric():
    key = course_service.generate_enrollment_key()
    assert re.fullmatch(r"[A-Z0-9]{8}", key)


@pytest.mark.django_db
class TestCourseManagement:

    def test_tutor_becomes_instructor_on_create(self, tutor):
        course = course_service.create_course(tutor, {"title": "Algebra", "enroll_emails": ["a@x.io", "a@x.io"]})
        assert course.instructor == tutor
        assert course.enroll_emails == ["a@x.io"]

    def test_create_requires_staff(self, student):
        with pytest.raises(PermissionDenied):
            course_service.create_course(student, {"title": "Hack"})
        assert not Course.objects.exists()

    def test_bulk_enroll_dedups(self, tutor, course):
        course.enroll_emails = ["a@x.io"]
        course.save()
        updated = course_service.bulk_enroll(tutor, course, "a@x.io, b@x.io\nb@x.io\n\n c@x.io ")
        assert updated.enroll_emails == ["a@x.io", "b@x.io", "c@x.io"]
        course.refresh_from_db()
        assert course.enroll_emails == ["a@x.io", "b@x.io", "c@x.io"]

    def test_bulk_enroll_needs_an_email(self, tutor, course):
        with pytest.raises(ValidationError):
            course_service.bulk_enroll(tutor, course, " ,\n ")

    def test_enroll_users_resolves_emails(self, tutor, course, user_factory):
        first = user_factory(UserRole.STUDENT, "first@x.io")
        second = user_factory(UserRole.STUDENT, "second@x.io")
        course.enroll_emails = ["first@x.io"]
        course.save()
        updated = course_service.enroll_users(tutor, course, [first.id, second.id, 999999])
        assert updated.enroll_emails == ["first@x.io", "second@x.io"]

    def test_self_enroll_with_matching_key(self, student, course):
        course.enrollment_key = "ABCD1234"
        course.save()
        enrollment = course_service.self_enroll(student, course, "ABCD1234")
        course.refresh_from_db()
        assert enrollment.student == student
        assert course.enroll_emails == [student.email]
        course_service.self_enroll(student, course, "ABCD1234")
        course.refresh_from_db()
        assert course.enroll_emails == [student.email]
        assert CourseEnrollment.objects.filter(course=course, student=student).count() == 1

    @pytest.mark.parametrize("key,allow,given_key", [
        ("ABCD1234", True, "WRONG"),
        ("", True, ""),
        ("ABCD1234", False, "ABCD1234"),
    ])
    def test_self_enroll_rejected(self, student, course, key, allow, given_key):
        course.enrollment_key = key
        course.allow_self_enroll = allow
        course.save()
        with pytest.raises(PermissionDenied):
            course_service.self_enroll(student, course, given_key)
        course.refresh_from_db()
        assert course.enroll_emails == []

    def test_assign_instructor_requires_tutor(self, admin, course, student, user_factory):
        other_tutor = user_factory(UserRole.TUTOR)
        assert course_service.assign_instructor(admin, course, other_tutor).instructor == other_tutor
        with pytest.raises(ValidationError):
            course_service.assign_instructor(admin, course, student)

    def test_publish_toggle_and_explicit(self, tutor, course):
        assert course_service.set_published(tutor, course).is_active is False
        assert course_service.set_published(tutor, course).is_active is True
        assert course_service.set_published(tutor, course, published=True).is_active is True

    def test_archive(self, tutor, course):
        archived = course_service.archive_course(tutor, course)
        assert archived.is_active is False
        assert archived.archived is True
        assert course not in Course.objects.active()

    def test_copy_course(self, tutor, course):
        course.enroll_emails = ["a@x.io"]
        course.department = "Maths"
        course.tags = ["algebra"]
        course.save()
        clone = course_service.copy_course(tutor, course, "Intro Copy")
        assert clone.pk != course.pk
        assert clone.title == "Intro Copy"
        assert clone.enroll_emails == []
        assert clone.department == "Maths"
        assert clone.tags == ["algebra"]
        assert clone.instructor == course.instructor

    def test_reset_enrollments(self, tutor, course):
        course.enroll_emails = ["a@x.io", "b@x.io"]
        course.save()
        assert course_service.reset_enrollments(tutor, course).enroll_emails == []

    def test_regenerate_key_and_fix_access(self, tutor, course):
        course.enrollment_key = "OLDKEY12"
        course.is_active = False
        course.save()
        rotated = course_service.regenerate_enrollment_key(tutor, course)
        assert rotated.enrollment_key != "OLDKEY12"
        assert rotated.is_active is False
        fixed = course_service.fix_access(tutor, course)
        assert fixed.is_active is True
        assert re.fullmatch(r"[A-Z0-9]{8}", fixed.enrollment_key)

    def test_enroll_requires_active_course(self, student, course):
        course.is_active = False
        course.save()
        with pytest.raises(PermissionDenied):
            course_service.enroll(student, course)

    def test_course_stats(self, tutor, course):
        course.enroll_emails = ["a@x.io", "b@x.io"]
        course.save()
        baker.make("learning.Assignment", course=course, _quantity=2)
        stats = course_service.course_stats(course)
        assert stats["enrolled"] == 2
        assert stats["assignments"] == 2
        assert stats["submissions"] == 0

    def test_archived_courses_stay_out_of_the_listing(self, tutor, course):
        course_service.archive_course(tutor, course)
        with pytest.raises(Conflict):
            course_service.set_published(tutor, course, published=True)
        with pytest.raises(Conflict):
            course_service.fix_access(tutor, course)
        assert course_service.set_published(tutor, course, published=False).is_active is False
        Course.objects.filter(pk=course.pk).update(is_active=True)
        assert not Course.objects.active().filter(pk=course.pk).exists()
