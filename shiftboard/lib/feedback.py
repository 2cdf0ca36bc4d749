"""
Operation feedback for mutating actions.

Every mutating action runs through `OperationFeedback.run()`:

    idle -> loading -> success -> (after success_clear_seconds) idle
    idle -> loading -> error   -> (after error_clear_seconds)   idle

Listeners receive every state change, which is how a presentation layer
streams progress. An instance runs one operation at a time; a second call
while one is loading raises OperationInProgress instead of interleaving state.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "오류가 발생했습니다."


class FeedbackState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class OperationInProgress(Exception):
    """Raised when an operation is started while another is still loading."""
    pass


class OperationFailed(Exception):
    """An operation returned a result that reported failure."""
    pass


class PartialSyncError(Exception):
    """The authoritative write succeeded but one or more mirror writes failed.

    Nothing is rolled back; the message tells the user what to reconcile.
    `alert` requests the blocking alert (set when an audit log write failed).
    """

    def __init__(self, summary: str, failures: list[tuple[str, str]], alert: bool = False):
        self.failures = failures
        self.alert = alert
        details = "; ".join(f"{step}: {reason}" for step, reason in failures)
        super().__init__(f"{summary} ({details})" if details else summary)


@dataclass
class OperationOutcome:
    """Result of a feedback-wrapped operation."""
    success: bool
    message: str
    data: Any = None
    error: Exception | None = None


Listener = Callable[[FeedbackState, str], None]
Scheduler = Callable[[float, Callable[[], None]], Any]
Alert = Callable[[str], None]


def threading_scheduler(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Run `callback` after `delay` seconds on a daemon timer thread."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


def log_alert(message: str) -> None:
    """Default blocking-alert hook: there is no UI, so log it."""
    logger.error(f"[FEEDBACK] ALERT: {message}")


class OperationFeedback:
    """Four-state status reporter wrapping mutating operations."""

    def __init__(
        self,
        success_clear_seconds: float = 1.0,
        error_clear_seconds: float = 2.0,
        scheduler: Scheduler = threading_scheduler,
        alert: Alert = log_alert,
        on_refresh: Callable[[], None] | None = None,
    ):
        """Initialize the reporter.

        Args:
            success_clear_seconds: Delay before returning to idle after success
            error_clear_seconds: Delay before returning to idle after an error
            scheduler: Callable(delay, fn) used to schedule the return to idle
            alert: Blocking-alert hook for disruptive failures
            on_refresh: Reload hook called after every successful operation
        """
        self.success_clear_seconds = success_clear_seconds
        self.error_clear_seconds = error_clear_seconds
        self.scheduler = scheduler
        self.alert = alert
        self.on_refresh = on_refresh
        self.state = FeedbackState.IDLE
        self.message = ""
        self._listeners: list[Listener] = []
        self._generation = 0

    @property
    def busy(self) -> bool:
        return self.state == FeedbackState.LOADING

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _set(self, state: FeedbackState, message: str) -> None:
        self.state = state
        self.message = message
        for listener in self._listeners:
            listener(state, message)

    def _schedule_idle(self, delay: float) -> None:
        generation = self._generation

        def clear():
            # A newer operation owns the state now
            if generation == self._generation and not self.busy:
                self._set(FeedbackState.IDLE, "")

        self.scheduler(delay, clear)

    def run(
        self,
        loading_message: str,
        success_message: str,
        operation: Callable[[], Any],
        alert_on_error: bool = False,
    ) -> OperationOutcome:
        """Run `operation` with loading/success/error reporting.

        A result object with a false `success` attribute (e.g. StorageResult)
        counts as failure, with its `message` surfaced.

        Args:
            loading_message: Message while the operation runs
            success_message: Message on success
            operation: Zero-argument callable performing the work
            alert_on_error: Also raise the blocking alert on any failure

        Returns:
            OperationOutcome; exceptions from `operation` are reported, not raised.

        Raises:
            OperationInProgress: if another operation is still loading
        """
        if self.busy:
            raise OperationInProgress(f"Operation in progress: {self.message}")

        self._generation += 1
        self._set(FeedbackState.LOADING, loading_message)

        try:
            result = operation()
            if result is not None and getattr(result, "success", True) is False:
                raise OperationFailed(getattr(result, "message", None) or "작업에 실패했습니다.")
        except Exception as e:
            message = str(e) or DEFAULT_ERROR_MESSAGE
            logger.error(f"[FEEDBACK] {loading_message} failed: {message}")
            self._set(FeedbackState.ERROR, message)
            # Thrown errors alert unless they say otherwise; reported failures don't
            if alert_on_error or getattr(e, "alert", not isinstance(e, OperationFailed)):
                self.alert(message)
            self._schedule_idle(self.error_clear_seconds)
            return OperationOutcome(success=False, message=message, error=e)

        self._set(FeedbackState.SUCCESS, success_message)
        if self.on_refresh:
            try:
                self.on_refresh()
            except Exception as e:
                logger.warning(f"[FEEDBACK] Refresh after '{success_message}' failed: {e}")
        self._schedule_idle(self.success_clear_seconds)
        return OperationOutcome(success=True, message=success_message, data=result)
