# --- Purpose -------------------------------------------------------------------
# Sentiment-driven follow-up ("checkup") notifications.
#
# After each bot reply the chat screen asks the FollowupScheduler to start a
# one-shot timer. The timer length depends on the reply's sentiment score:
#
#   score missing   -> 15s
#   score <= 4      -> 30s   (negative: give the user a little longer)
#   4 < score < 7   -> 15s   (neutral)
#   score >= 7      -> 75s   (positive)
#
# When the timer fires, the checkup prompt for the conversation thread is
# fetched on a worker thread and handed to the notifier. Only one timer is ever
# pending: starting a new one, or the user sending another message, cancels
# the old timer together with any notification it already queued.

from threading import Thread

from kivy.clock import Clock
from kivy.logger import Logger

BASE_DELAY_SECONDS = 15
NEGATIVE_EXTRA_SECONDS = 15
POSITIVE_EXTRA_SECONDS = 60
NEGATIVE_MAX_SCORE = 4
POSITIVE_MIN_SCORE = 7

FALLBACK_CHECKUP_MESSAGE = "Venty: How are you feeling now?"


def additional_delay(sentiment_score):
    """Extra seconds on top of the base delay for a given sentiment score."""
    if sentiment_score is None:
        return 0
    if sentiment_score <= NEGATIVE_MAX_SCORE:
        return NEGATIVE_EXTRA_SECONDS
    if sentiment_score >= POSITIVE_MIN_SCORE:
        return POSITIVE_EXTRA_SECONDS
    return 0


def followup_delay(sentiment_score):
    """Total seconds to wait before the checkup notification."""
    return BASE_DELAY_SECONDS + additional_delay(sentiment_score)


def _run_in_thread(target, *args):
    # daemon=True so a pending checkup fetch never keeps the app alive on exit
    Thread(target=target, args=args, daemon=True).start()


class FollowupScheduler:
    """
    Owns the single pending follow-up timer for a chat session.

    - fetch_checkup(thread_id) -> str | None: blocking lookup of the prompt.
    - notifier: object with `schedule_local_notification(delay_seconds, message)`
      and `cancel_all_notifications()`.
    - clock: anything with `schedule_once(callback, timeout)` returning an
      event with `.cancel()`; the Kivy Clock by default.
    - run_in_background(target, *args): how the fetch is taken off the UI
      thread; a daemon Thread by default.
    """

    def __init__(self, fetch_checkup, notifier, clock=None, run_in_background=None):
        self.fetch_checkup = fetch_checkup
        self.notifier = notifier
        self.clock = clock or Clock
        self.run_in_background = run_in_background or _run_in_thread
        self._event = None

    @property
    def pending(self):
        return self._event is not None

    def start(self, sentiment_score, thread_id):
        """Replace any pending follow-up with one for this exchange."""
        self.cancel()
        delay = followup_delay(sentiment_score)
        thread_id = thread_id or ""
        Logger.info(f"Followup: Checkup for thread '{thread_id}' in {delay} seconds")
        self._event = self.clock.schedule_once(lambda dt: self._on_timer(thread_id), delay)
        return delay

    def cancel(self):
        """Drop the pending timer and anything the notifier still has queued."""
        self._cancel_timer()
        self.notifier.cancel_all_notifications()

    def release(self):
        """Stop the timer when the session ends. Delivered notifications stay."""
        self._cancel_timer()

    def _cancel_timer(self):
        if self._event is not None:
            self._event.cancel()
            self._event = None

    def _on_timer(self, thread_id):
        self._event = None
        # the fetch is not cancellable: once started it always ends in a notification
        self.run_in_background(self._deliver, thread_id)

    def _deliver(self, thread_id):
        try:
            message = self.fetch_checkup(thread_id)
        except Exception as e:
            Logger.error(f"Followup: Error fetching checkup message: {e}")
            message = None
        if not message:
            message = FALLBACK_CHECKUP_MESSAGE
        Logger.info(f"Followup: Scheduling notification: {message}")
        self.notifier.schedule_local_notification(0, message)
