"""Tests for courses, modules and materials."""

import pytest

from eduarch.store import ConflictError, CourseStatus, MaterialType, NotFoundError, ValidationError


class TestCourses:
    """Tests for the courses repository."""

    def test_create_course_for_teacher(self, store, teacher):
        """Teacher user + course referencing them succeeds with a generated id."""
        course = store.courses.create(title="Algebra", teacher_id=teacher.id)
        assert course.id.startswith("crs_")
        assert course.teacher_id == teacher.id
        assert course.status == CourseStatus.DRAFT
        assert course.description == ""
        assert store.courses.get(course.id) == course

    def test_create_course_unknown_teacher(self, store):
        with pytest.raises(ValidationError) as exc:
            store.courses.create(title="Algebra", teacher_id="usr_missing")
        assert exc.value.field == "teacher_id"
        assert exc.value.rule == "must_reference_existing"

    def test_create_course_teacher_must_be_teacher(self, store, student):
        with pytest.raises(ValidationError) as exc:
            store.courses.create(title="Algebra", teacher_id=student.id)
        assert exc.value.rule == "must_reference_teacher"

    def test_create_course_invalid_status(self, store, teacher):
        with pytest.raises(ValidationError) as exc:
            store.courses.create(title="Algebra", teacher_id=teacher.id, status="PUBLISHED")
        assert exc.value.field == "status"

    def test_update_status(self, store, course):
        updated = store.courses.update(course.id, status="ACTIVE")
        assert updated.status == CourseStatus.ACTIVE
        assert updated.updated_at >= course.updated_at
        assert updated.created_at == course.created_at

    def test_update_to_non_teacher(self, store, course, student):
        with pytest.raises(ValidationError):
            store.courses.update(course.id, teacher_id=student.id)
        assert store.courses.get(course.id).teacher_id == course.teacher_id

    def test_update_without_changes_returns_record(self, store, course):
        assert store.courses.update(course.id) == course

    def test_list_courses_by_teacher(self, store, teacher, course):
        other = store.users.create(name="Other", email="o@example.com", role="TEACHER")
        store.courses.create(title="Other course", teacher_id=other.id)
        assert store.courses.list(teacher_id=teacher.id) == [course]

    def test_get_course_not_found(self, store):
        with pytest.raises(NotFoundError):
            store.courses.get("crs_missing")


class TestModules:
    """Tests for the modules repository."""

    def test_create_module_unknown_course(self, store):
        """Module referencing a non-existent course fails validation."""
        with pytest.raises(ValidationError) as exc:
            store.modules.create(title="Intro", course_id="crs_missing", order=1)
        assert exc.value.field == "course_id"

    def test_module_order_unique_within_course(self, store, course, module):
        with pytest.raises(ConflictError) as exc:
            store.modules.create(title="Dup", course_id=course.id, order=module.order)
        assert exc.value.rule == "unique_module_order"

    def test_same_order_in_other_course(self, store, teacher, module):
        other = store.courses.create(title="Other", teacher_id=teacher.id)
        created = store.modules.create(title="Intro", course_id=other.id, order=module.order)
        assert created.order == module.order

    def test_default_order_appends(self, store, course, module):
        second = store.modules.create(title="Second", course_id=course.id)
        third = store.modules.create(title="Third", course_id=course.id)
        assert second.order == module.order + 1
        assert third.order == module.order + 2

    def test_default_order_starts_at_one(self, store, course):
        assert store.modules.create(title="First", course_id=course.id).order == 1

    def test_reorder_to_taken_slot(self, store, course, module):
        second = store.modules.create(title="Second", course_id=course.id, order=2)
        with pytest.raises(ConflictError):
            store.modules.update(second.id, order=module.order)

    def test_reorder_to_free_slot(self, store, module):
        assert store.modules.update(module.id, order=7).order == 7

    def test_negative_order_rejected(self, store, course):
        with pytest.raises(ValidationError) as exc:
            store.modules.create(title="Bad", course_id=course.id, order=-1)
        assert exc.value.rule == "must_be_non_negative"

    def test_list_by_course_sorted(self, store, course):
        store.modules.create(title="B", course_id=course.id, order=5)
        store.modules.create(title="A", course_id=course.id, order=2)
        titles = [m.title for m in store.modules.list(course_id=course.id, order_by="order")]
        assert titles == ["A", "B"]


class TestMaterials:
    """Tests for the materials repository."""

    def test_create_material(self, store, module):
        material = store.materials.create(
            title="Slides", type="PDF", content="slides.pdf", module_id=module.id
        )
        assert material.type == MaterialType.PDF
        assert material.order == 1

    def test_create_material_unknown_module(self, store):
        with pytest.raises(ValidationError) as exc:
            store.materials.create(title="Slides", type="PDF", module_id="mod_missing")
        assert exc.value.field == "module_id"

    def test_create_material_invalid_type(self, store, module):
        with pytest.raises(ValidationError):
            store.materials.create(title="Slides", type="PPT", module_id=module.id)

    def test_list_by_type(self, store, module):
        video = store.materials.create(title="Lecture", type="VIDEO", module_id=module.id)
        store.materials.create(title="Notes", type="TEXT", module_id=module.id)
        assert store.materials.list(module_id=module.id, type="VIDEO") == [video]
