"""Tests for LocalNotifier (Kivy clock faked, OS notification mocked)."""

from unittest.mock import MagicMock, patch

from venty.notifications import LocalNotifier, show_os_notification


class TestLocalNotifier:
    def test_delivers_after_delay(self, clock):
        presenter = MagicMock()
        notifier = LocalNotifier(clock=clock, presenter=presenter)
        received = []
        notifier.add_received_listener(received.append)

        notifier.schedule_local_notification(5, "hello")
        clock.advance(4)
        assert received == []
        clock.advance(1)

        presenter.assert_called_once_with("hello")
        assert received == ["hello"]
        assert notifier.pending_count == 0

    def test_zero_delay_waits_for_next_tick(self, clock):
        presenter = MagicMock()
        notifier = LocalNotifier(clock=clock, presenter=presenter)

        notifier.schedule_local_notification(0, "now")
        presenter.assert_not_called()
        clock.advance(0)

        presenter.assert_called_once_with("now")

    def test_cancel_all_drops_pending(self, clock):
        presenter = MagicMock()
        notifier = LocalNotifier(clock=clock, presenter=presenter)
        notifier.schedule_local_notification(0, "a")
        notifier.schedule_local_notification(10, "b")
        assert notifier.pending_count == 2

        notifier.cancel_all_notifications()
        clock.advance(60)

        presenter.assert_not_called()
        assert notifier.pending_count == 0

    def test_event_cancelled_after_fire_was_queued_is_skipped(self, clock):
        presenter = MagicMock()
        notifier = LocalNotifier(clock=clock, presenter=presenter)
        event = notifier.schedule_local_notification(0, "late")
        notifier.cancel_all_notifications()

        event.callback(0)

        presenter.assert_not_called()

    def test_removed_listener_is_not_called(self, clock):
        notifier = LocalNotifier(clock=clock, presenter=MagicMock())
        received = []
        remove = notifier.add_received_listener(received.append)
        remove()
        remove()

        notifier.schedule_local_notification(0, "x")
        clock.advance(0)

        assert received == []


class TestShowOsNotification:
    @patch("plyer.notification")
    def test_notifies_with_app_title(self, mock_notification):
        show_os_notification("How are you?")

        mock_notification.notify.assert_called_once_with(
            title="Venty", message="How are you?", app_name="Venty"
        )

    @patch("plyer.notification")
    def test_missing_backend_is_logged_not_raised(self, mock_notification):
        mock_notification.notify.side_effect = NotImplementedError("no backend")

        show_os_notification("How are you?")
