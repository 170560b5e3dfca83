"""
Host platform capability interface and an in-memory mock.

The pipeline never touches a browser or device API directly. Everything it
needs from the host goes through SensorPlatform:
- subscribe(kind, handler) -> unsubscribe callable
- query_screen_angle() -> current screen rotation (any int, normalised later)
- query_capability() -> True when a gated consent API exists (iOS 13+ style)
- request_consent() -> Future resolving to "granted" / "denied"
- alert(message) -> user-visible notice

MockPlatform implements the same API for tests and for the headless demo,
so development does not need a phone:
- emit() delivers events synchronously to subscribed handlers
- consent can be answered immediately, left pending, or fail
- set_screen_angle() fires the rotation notifications

Usage:
    platform = MockPlatform(requires_consent=True, consent_response="granted")
    pipeline = SensorPipeline(platform)
    pipeline.start()
    pipeline.request_permission()
    platform.emit(EventKind.ORIENTATION, RawOrientationEvent(beta=5.0, gamma=3.0))
"""

import logging
import threading
from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Optional, Protocol

from core.sensors.types import EventKind

log = logging.getLogger(__name__)

GRANTED = "granted"
DENIED = "denied"

EventHandler = Callable[[Any], None]


class SensorPlatform(Protocol):
    """Everything the pipeline needs from the host environment."""

    def subscribe(self, kind: str, handler: EventHandler) -> Callable[[], None]:
        ...

    def query_screen_angle(self) -> int:
        ...

    def query_capability(self) -> bool:
        ...

    def request_consent(self) -> "Future[str]":
        ...

    def alert(self, message: str) -> None:
        ...


class MockPlatform:
    """
    In-memory SensorPlatform for development without a device.

    Consent modes:
    - consent_response="granted"/"denied": resolved immediately
    - consent_response=None: left pending, answer later with resolve_consent()
    - consent_error=Exception(...): the consent call fails
    """

    def __init__(
        self,
        requires_consent: bool = False,
        consent_response: Optional[str] = GRANTED,
        consent_error: Optional[BaseException] = None,
        screen_angle: int = 0,
    ) -> None:
        self.requires_consent = requires_consent
        self.consent_response = consent_response
        self.consent_error = consent_error
        self.screen_angle = screen_angle

        self._lock = threading.Lock()
        self._handlers: Dict[str, List[EventHandler]] = {}

        self.consent_calls = 0
        self.pending_consents: List[Future] = []
        self.alerts: List[str] = []

    # ------------------------------------------------------------------
    # SensorPlatform API
    # ------------------------------------------------------------------

    def subscribe(self, kind: str, handler: EventHandler) -> Callable[[], None]:
        with self._lock:
            self._handlers.setdefault(kind, []).append(handler)

        def unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(kind, [])
                if handler in handlers:
                    handlers.remove(handler)

        return unsubscribe

    def query_screen_angle(self) -> int:
        return self.screen_angle

    def query_capability(self) -> bool:
        return self.requires_consent

    def request_consent(self) -> "Future[str]":
        self.consent_calls += 1
        future: Future = Future()
        if self.consent_error is not None:
            future.set_exception(self.consent_error)
        elif self.consent_response is not None:
            future.set_result(self.consent_response)
        else:
            self.pending_consents.append(future)
        return future

    def alert(self, message: str) -> None:
        log.info("[ALERT] %s", message)
        self.alerts.append(message)

    # ------------------------------------------------------------------
    # Test / demo helpers
    # ------------------------------------------------------------------

    def listener_count(self, kind: str) -> int:
        with self._lock:
            return len(self._handlers.get(kind, []))

    def emit(self, kind: str, event: Any = None) -> int:
        """Deliver an event to every handler of kind. Returns handler count."""
        with self._lock:
            handlers = list(self._handlers.get(kind, []))
        for handler in handlers:
            handler(event)
        return len(handlers)

    def set_screen_angle(self, angle: int) -> None:
        """Rotate the mock screen and fire the rotation notifications."""
        self.screen_angle = angle
        for kind in EventKind.SCREEN_EVENTS:
            self.emit(kind)

    def resolve_consent(self, response: str = GRANTED) -> None:
        """Answer the oldest pending consent call."""
        if not self.pending_consents:
            raise RuntimeError("No pending consent request")
        self.pending_consents.pop(0).set_result(response)

    def fail_consent(self, error: BaseException) -> None:
        """Fail the oldest pending consent call."""
        if not self.pending_consents:
            raise RuntimeError("No pending consent request")
        self.pending_consents.pop(0).set_exception(error)
