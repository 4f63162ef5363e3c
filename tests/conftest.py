"""Pytest configuration for Venty tests.

Kivy reads sys.argv and sets up console/file logging the first time it is
imported. Those environment switches must be in place before any test module
pulls in `kivy.clock` or `kivy.logger`.
"""

import os
import tempfile

os.environ.setdefault("KIVY_NO_ARGS", "1")
os.environ.setdefault("KIVY_NO_CONSOLELOG", "1")
os.environ.setdefault("KIVY_NO_FILELOG", "1")
os.environ.setdefault("KIVY_NO_CONFIG", "1")
os.environ.setdefault("KIVY_HOME", tempfile.mkdtemp(prefix="venty-kivy-"))

import pytest  # noqa: E402


class FakeEvent:
    def __init__(self, clock, callback, timeout):
        self.clock = clock
        self.callback = callback
        self.timeout = timeout
        self.due = clock.now + timeout
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeClock:
    """Stand-in for kivy.clock.Clock that only moves when told to."""

    def __init__(self):
        self.now = 0
        self.events = []

    def schedule_once(self, callback, timeout=0):
        event = FakeEvent(self, callback, timeout)
        self.events.append(event)
        return event

    @property
    def pending(self):
        return [e for e in self.events if not e.cancelled]

    def advance(self, seconds):
        """Move time forward and fire every due, uncancelled event in order."""
        target = self.now + seconds
        while True:
            due = sorted(
                (e for e in self.pending if e.due <= target), key=lambda e: e.due
            )
            if not due:
                break
            event = due[0]
            self.events.remove(event)
            self.now = max(self.now, event.due)
            event.callback(self.now - (event.due - event.timeout))
        self.now = target


class RecordingNotifier:
    def __init__(self):
        self.scheduled = []
        self.cancel_calls = 0

    def schedule_local_notification(self, delay_seconds, message):
        self.scheduled.append((delay_seconds, message))

    def cancel_all_notifications(self):
        self.cancel_calls += 1
        self.scheduled.clear()


def run_inline(target, *args):
    target(*args)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def inline():
    """Background runner that does the work on the calling thread."""
    return run_inline
