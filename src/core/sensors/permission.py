"""
Consent gate for sensor access.

Some platforms (iOS 13+ Safari) refuse orientation/motion events until the
user approves them, and only accept the approval request when it is made
synchronously from a user gesture such as a button press. A request issued
from a timer or after an await is silently rejected by the platform, so
request_consent() must be called directly from the gesture handler.

States:
- NOT_REQUIRED: capability check found no gated consent API, streams open at once
- REQUIRED: streams stay closed until consent is granted
- GRANTED: consent obtained, streams open

REQUIRED -> GRANTED is the only transition. A denial or a platform error
leaves the gate in REQUIRED, is logged and shown to the user, and the gate
accepts another attempt.
"""

import logging
import threading
from concurrent.futures import Future
from typing import Callable, Optional

from core.sensors.platform import GRANTED, SensorPlatform
from core.sensors.types import PermissionState

log = logging.getLogger(__name__)


class ConsentError(Exception):
    """The platform consent call failed or was denied."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


def _resolved(state: PermissionState) -> "Future[PermissionState]":
    future: Future = Future()
    future.set_result(state)
    return future


class PermissionGate:
    """State machine mediating consent before sensor streams open."""

    def __init__(self, platform: SensorPlatform, on_granted: Optional[Callable[[], None]] = None) -> None:
        self.platform = platform
        self.on_granted = on_granted

        self._lock = threading.Lock()
        self._pending: Optional[Future] = None

        self.state = PermissionState.REQUIRED if platform.query_capability() else PermissionState.NOT_REQUIRED
        self.last_error: Optional[ConsentError] = None
        log.info("Sensor permission capability check: %s", self.state.value)

    @property
    def streams_allowed(self) -> bool:
        return self.state.streams_allowed

    def open_if_allowed(self) -> bool:
        """Open streams right away when no consent is needed."""
        if self.state is PermissionState.NOT_REQUIRED:
            self._open_streams()
            return True
        return False

    def request_consent(self) -> "Future[PermissionState]":
        """
        Ask the platform for sensor consent.

        Must run synchronously inside a user-initiated interaction.

        Returns:
            Future resolving to the resulting PermissionState. Calls made while
            a request is outstanding get the same future; calls made once
            streams are allowed resolve immediately and do nothing.
        """
        with self._lock:
            if self.state is not PermissionState.REQUIRED:
                return _resolved(self.state)
            if self._pending is not None:
                return self._pending
            result: Future = Future()
            self._pending = result

        log.info("Requesting sensor consent")
        try:
            platform_future = self.platform.request_consent()
        except Exception as e:
            self._fail(result, ConsentError(f"Error requesting permission: {e}", cause=e))
            return result

        platform_future.add_done_callback(lambda f: self._on_consent_done(f, result))
        return result

    def _on_consent_done(self, platform_future: Future, result: Future) -> None:
        try:
            self._handle_response(platform_future, result)
        except Exception as e:
            self._fail(result, ConsentError(f"Error handling permission response: {e}", cause=e))

    def _handle_response(self, platform_future: Future, result: Future) -> None:
        if platform_future.cancelled():
            self._fail(result, ConsentError("Sensor permission request was cancelled"))
            return

        error = platform_future.exception()
        if error is not None:
            self._fail(result, ConsentError(f"Error requesting permission: {error}", cause=error))
            return

        response = platform_future.result()
        if response != GRANTED:
            log.warning("Sensor consent not granted: %s", response)
            self.last_error = ConsentError(f"Sensor permission {response}")
            try:
                self.platform.alert(f"Sensor permission {response}. Tap enable to try again.")
            finally:
                self._finish(result, self.state)
            return

        # Streams first: if opening them fails the gate stays REQUIRED
        self._open_streams()
        with self._lock:
            self.state = PermissionState.GRANTED
            self.last_error = None
        log.info("Sensor consent granted")
        self._finish(result, PermissionState.GRANTED)

    def _fail(self, result: Future, error: ConsentError) -> None:
        log.error("Sensor permission request failed", exc_info=error.cause or error)
        self.last_error = error
        try:
            self.platform.alert(str(error))
        finally:
            self._finish(result, self.state)

    def _finish(self, result: Future, state: PermissionState) -> None:
        with self._lock:
            self._pending = None
        if not result.done():
            result.set_result(state)

    def _open_streams(self) -> None:
        if self.on_granted is not None:
            self.on_granted()
