"""Tests for notifications (read state) and events (participants)."""

import pytest

from eduarch.store import NotFoundError, NotificationType, ValidationError


@pytest.fixture
def notification(store, student):
    return store.notifications.create(
        user_id=student.id, title="Welcome", message="Hello!", type="ANNOUNCEMENT"
    )


class TestNotifications:
    """Tests for the notifications repository."""

    def test_create_notification_unread(self, notification):
        assert notification.is_read is False
        assert notification.type == NotificationType.ANNOUNCEMENT

    def test_unknown_user(self, store):
        with pytest.raises(ValidationError) as exc:
            store.notifications.create(
                user_id="usr_missing", title="x", message="y", type="SYSTEM"
            )
        assert exc.value.field == "user_id"

    def test_cannot_create_as_read(self, store, student):
        with pytest.raises(ValidationError) as exc:
            store.notifications.create(
                user_id=student.id, title="x", message="y", type="SYSTEM", is_read=True
            )
        assert exc.value.field == "is_read"

    def test_update_cannot_flip_read_state(self, store, notification):
        """is_read only changes through mark_read."""
        with pytest.raises(ValidationError) as exc:
            store.notifications.update(notification.id, is_read=True)
        assert exc.value.rule == "read_only"
        assert store.notifications.get(notification.id).is_read is False

    def test_update_keeps_read_state(self, store, notification):
        store.notifications.mark_read(notification.id)
        updated = store.notifications.update(notification.id, title="Welcome!")
        assert updated.is_read is True

    def test_mark_read(self, store, notification):
        marked = store.notifications.mark_read(notification.id)
        assert marked.is_read is True
        # Idempotent
        assert store.notifications.mark_read(notification.id).is_read is True

    def test_mark_read_not_found(self, store):
        with pytest.raises(NotFoundError):
            store.notifications.mark_read("ntf_missing")

    def test_unread_count_and_mark_all(self, store, student, notification):
        store.notifications.create(user_id=student.id, title="Grade", message="80", type="GRADE")
        assert store.notifications.unread_count(student.id) == 2
        assert store.notifications.mark_all_read(student.id) == 2
        assert store.notifications.unread_count(student.id) == 0
        assert store.notifications.mark_all_read(student.id) == 0

    def test_unread_count_unknown_user(self, store):
        with pytest.raises(NotFoundError):
            store.notifications.unread_count("usr_missing")

    def test_list_by_read_state(self, store, student, notification):
        other = store.notifications.create(
            user_id=student.id, title="Grade", message="80", type="GRADE"
        )
        store.notifications.mark_read(notification.id)
        assert store.notifications.list(user_id=student.id, is_read=False) == [other]


class TestEvents:
    """Tests for the events repository."""

    def test_create_event_minimal(self, store):
        event = store.events.create(
            title="Office hours",
            start_time="2026-11-02T10:00:00+00:00",
            end_time="2026-11-02T11:00:00+00:00",
        )
        assert event.id.startswith("evt_")
        assert event.course_id is None
        assert event.description is None
        assert event.location is None
        assert event.participant_user_ids == []

    def test_end_before_start(self, store):
        with pytest.raises(ValidationError) as exc:
            store.events.create(
                title="Backwards",
                start_time="2026-11-02T11:00:00+00:00",
                end_time="2026-11-02T10:00:00+00:00",
            )
        assert exc.value.field == "end_time"

    def test_zero_length_event(self, store):
        event = store.events.create(
            title="Deadline", start_time="2026-11-02T10:00:00", end_time="2026-11-02T10:00:00"
        )
        assert event.start_time == event.end_time

    def test_update_end_before_start(self, store):
        event = store.events.create(
            title="Talk", start_time="2026-11-02T10:00:00", end_time="2026-11-02T11:00:00"
        )
        with pytest.raises(ValidationError):
            store.events.update(event.id, end_time="2026-11-02T09:00:00")

    def test_unknown_course(self, store):
        with pytest.raises(ValidationError) as exc:
            store.events.create(
                title="Talk",
                start_time="2026-11-02T10:00:00",
                end_time="2026-11-02T11:00:00",
                course_id="crs_missing",
            )
        assert exc.value.field == "course_id"

    def test_participants(self, store, course, teacher, student):
        event = store.events.create(
            title="Kickoff",
            start_time="2026-11-02T10:00:00",
            end_time="2026-11-02T11:00:00",
            course_id=course.id,
            location="Room 1",
            participant_user_ids=[teacher.id, student.id, teacher.id],
        )
        assert event.participant_user_ids == [teacher.id, student.id]
        assert store.events.list_for_user(student.id) == [event]

    def test_unknown_participant(self, store):
        with pytest.raises(ValidationError) as exc:
            store.events.create(
                title="Talk",
                start_time="2026-11-02T10:00:00",
                end_time="2026-11-02T11:00:00",
                participant_user_ids=["usr_missing"],
            )
        assert exc.value.field == "participant_user_ids"
        assert store.events.list() == []

    def test_add_and_remove_participant(self, store, teacher, student):
        event = store.events.create(
            title="Talk", start_time="2026-11-02T10:00:00", end_time="2026-11-02T11:00:00"
        )
        event = store.events.add_participant(event.id, student.id)
        assert event.participant_user_ids == [student.id]
        # Adding twice is a no-op
        assert store.events.add_participant(event.id, student.id).participant_user_ids == [
            student.id
        ]
        event = store.events.remove_participant(event.id, student.id)
        assert event.participant_user_ids == []
        with pytest.raises(NotFoundError):
            store.events.remove_participant(event.id, student.id)

    def test_add_unknown_participant(self, store):
        event = store.events.create(
            title="Talk", start_time="2026-11-02T10:00:00", end_time="2026-11-02T11:00:00"
        )
        with pytest.raises(ValidationError):
            store.events.add_participant(event.id, "usr_missing")

    def test_replace_participants(self, store, teacher, student):
        event = store.events.create(
            title="Talk",
            start_time="2026-11-02T10:00:00",
            end_time="2026-11-02T11:00:00",
            participant_user_ids=[teacher.id],
        )
        updated = store.events.update(event.id, participant_user_ids=[student.id])
        assert updated.participant_user_ids == [student.id]
        assert store.events.list_for_user(teacher.id) == []

    def test_delete_event_removes_participation(self, store, student):
        event = store.events.create(
            title="Talk",
            start_time="2026-11-02T10:00:00",
            end_time="2026-11-02T11:00:00",
            participant_user_ids=[student.id],
        )
        store.events.delete(event.id)
        assert store.events.list_for_user(student.id) == []
