"""
Tests for in-app notifications.
"""

import pytest

from shared.config.constants import NotificationType
from shared.utils.exceptions import ForbiddenError, NotFoundError, ValidationError
from rest_api.services.domain.notification_service import NotificationService


@pytest.fixture
def service(db_session):
    return NotificationService(db_session)


class TestCreateNotification:

    def test_create(self, service, student):
        notification = service.create_notification(
            student.id, NotificationType.SYSTEM, "Welcome", "Glad you're here"
        )

        assert notification.id
        assert notification.is_read is False
        assert notification.read_at is None

    @pytest.mark.parametrize(
        "kind,title,message",
        [
            ("party", "Title", "Message"),
            (NotificationType.SYSTEM, "", "Message"),
            (NotificationType.SYSTEM, "t" * 256, "Message"),
            (NotificationType.SYSTEM, "Title", ""),
            (NotificationType.SYSTEM, "Title", "m" * 1001),
        ],
    )
    def test_validation(self, service, student, kind, title, message):
        with pytest.raises(ValidationError):
            service.create_notification(student.id, kind, title, message)

    def test_helpers(self, service, student):
        update = service.notify_application_update(student.id, "a1", "Oxford", "under_review")
        reminder = service.notify_document_reminder(student.id, "passport copy")
        deadline = service.notify_deadline_approaching(student.id, "Your essay", 1)
        system = service.notify_system_update(student.id, "Maintenance", "Tonight at 10")
        message = service.notify_new_message(student.id, "Carla Test", "m1")

        assert update.type == NotificationType.APPLICATION_UPDATE
        assert update.message == "Your application to Oxford is now under review."
        assert update.data == {"applicationId": "a1", "status": "under_review"}
        assert reminder.type == NotificationType.DOCUMENT_REMINDER
        assert deadline.message == "Your essay is due in 1 day."
        assert system.type == NotificationType.SYSTEM
        assert message.data == {"messageId": "m1"}


class TestReadState:

    def test_mark_as_read(self, service, student):
        notification = service.notify_system_update(student.id, "Hi", "There")

        read = service.mark_as_read(notification.id, student.id)
        first_read_at = read.read_at
        again = service.mark_as_read(notification.id, student.id)

        assert read.is_read is True
        assert again.read_at == first_read_at
        assert service.unread_count(student.id) == 0

    def test_cannot_read_someone_elses(self, service, student, other_student):
        notification = service.notify_system_update(student.id, "Hi", "There")

        with pytest.raises(ForbiddenError):
            service.mark_as_read(notification.id, other_student.id)

    def test_missing(self, service, student):
        with pytest.raises(NotFoundError):
            service.mark_as_read("missing", student.id)

    def test_list_and_mark_all(self, service, student):
        for i in range(3):
            service.notify_system_update(student.id, f"N{i}", "Body")

        assert service.unread_count(student.id) == 3
        assert len(service.list_for_user(student.id, unread_only=True)) == 3
        assert service.mark_all_as_read(student.id) == 3
        assert service.list_for_user(student.id, unread_only=True) == []
        assert len(service.list_for_user(student.id)) == 3
