# --- Purpose -------------------------------------------------------------------
# Local notifications for the chat app.
#
# `LocalNotifier.schedule_local_notification(delay_seconds, message)` queues a
# message on the Kivy clock. When it comes due it is shown as an OS notification
# through plyer and passed to every `on_received` listener (the chat screen
# appends it to the conversation). `cancel_all_notifications()` drops everything
# still queued. Both methods may be called from worker threads because
# Clock.schedule_once is thread-safe; listeners always run on the main thread.

from threading import Lock

from kivy.clock import Clock
from kivy.logger import Logger

APP_NAME = "Venty"


def show_os_notification(message, title=APP_NAME):
    # plyer.notification: cross-platform facade over Android/Windows/macOS/libnotify.
    from plyer import notification
    try:
        notification.notify(title=title, message=message, app_name=APP_NAME)
    except (NotImplementedError, ModuleNotFoundError, OSError) as e:
        # No back-end on this platform (e.g. a desktop without dbus); the
        # in-app listeners still get the message.
        Logger.warning(f"Notifications: OS notification unavailable: {e}")


class LocalNotifier:
    def __init__(self, clock=None, presenter=None):
        self.clock = clock or Clock
        self.presenter = presenter or show_os_notification
        self._listeners = []
        self._scheduled = []
        self._lock = Lock()

    def add_received_listener(self, listener):
        """Register `listener(message)`; returns a callable that removes it."""
        self._listeners.append(listener)

        def remove():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return remove

    def schedule_local_notification(self, delay_seconds, message):
        holder = {}

        def fire(dt):
            with self._lock:
                if holder.get("event") not in self._scheduled:
                    return  # cancelled after it was queued on the clock
                self._scheduled.remove(holder["event"])
            self._deliver(message)

        with self._lock:
            # schedule_once(func, 0) still defers to the next frame
            holder["event"] = self.clock.schedule_once(fire, delay_seconds)
            self._scheduled.append(holder["event"])
        Logger.info(f"Notifications: Scheduled in {delay_seconds} seconds: {message}")
        return holder["event"]

    def cancel_all_notifications(self):
        with self._lock:
            scheduled, self._scheduled = self._scheduled, []
        for event in scheduled:
            event.cancel()
        if scheduled:
            Logger.info(f"Notifications: Cancelled {len(scheduled)} pending notification(s)")

    @property
    def pending_count(self):
        return len(self._scheduled)

    def _deliver(self, message):
        self.presenter(message)
        for listener in list(self._listeners):
            listener(message)
