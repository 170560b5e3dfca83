"""Tests for the PermissionGate state machine using MockPlatform."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from core.sensors.permission import ConsentError, PermissionGate
from core.sensors.platform import DENIED, GRANTED, MockPlatform
from core.sensors.types import PermissionState


def test_platform_without_consent_api_is_not_required():
    on_granted = Mock()
    gate = PermissionGate(MockPlatform(requires_consent=False), on_granted=on_granted)

    assert gate.state is PermissionState.NOT_REQUIRED
    assert gate.open_if_allowed() is True
    on_granted.assert_called_once()


def test_platform_with_consent_api_is_required_and_closed():
    on_granted = Mock()
    gate = PermissionGate(MockPlatform(requires_consent=True), on_granted=on_granted)

    assert gate.state is PermissionState.REQUIRED
    assert gate.open_if_allowed() is False
    assert not gate.streams_allowed
    on_granted.assert_not_called()


def test_granted_consent_opens_streams():
    platform = MockPlatform(requires_consent=True, consent_response=GRANTED)
    on_granted = Mock()
    gate = PermissionGate(platform, on_granted=on_granted)

    result = gate.request_consent()

    assert result.result(timeout=1) is PermissionState.GRANTED
    assert gate.state is PermissionState.GRANTED
    on_granted.assert_called_once()
    assert platform.alerts == []


def test_denied_consent_stays_required_and_alerts():
    platform = MockPlatform(requires_consent=True, consent_response=DENIED)
    on_granted = Mock()
    gate = PermissionGate(platform, on_granted=on_granted)

    result = gate.request_consent()

    assert result.result(timeout=1) is PermissionState.REQUIRED
    assert gate.state is PermissionState.REQUIRED
    on_granted.assert_not_called()
    assert len(platform.alerts) == 1
    assert isinstance(gate.last_error, ConsentError)


def test_platform_error_is_surfaced_and_retry_succeeds():
    platform = MockPlatform(requires_consent=True, consent_error=RuntimeError("NotAllowedError"))
    on_granted = Mock()
    gate = PermissionGate(platform, on_granted=on_granted)

    assert gate.request_consent().result(timeout=1) is PermissionState.REQUIRED
    assert "NotAllowedError" in platform.alerts[0]
    assert isinstance(gate.last_error.cause, RuntimeError)

    platform.consent_error = None
    platform.consent_response = GRANTED
    assert gate.request_consent().result(timeout=1) is PermissionState.GRANTED
    assert gate.last_error is None
    on_granted.assert_called_once()


def test_consent_call_raising_synchronously_is_handled():
    platform = MockPlatform(requires_consent=True)
    platform.request_consent = Mock(side_effect=RuntimeError("no user gesture"))
    gate = PermissionGate(platform)

    assert gate.request_consent().result(timeout=1) is PermissionState.REQUIRED
    assert gate.state is PermissionState.REQUIRED
    assert platform.alerts


def test_outstanding_request_is_shared():
    platform = MockPlatform(requires_consent=True, consent_response=None)
    gate = PermissionGate(platform)

    first = gate.request_consent()
    second = gate.request_consent()

    assert first is second
    assert platform.consent_calls == 1
    assert not first.done()

    platform.resolve_consent(GRANTED)
    assert first.result(timeout=1) is PermissionState.GRANTED


def test_cancelled_consent_allows_retry():
    platform = MockPlatform(requires_consent=True, consent_response=None)
    gate = PermissionGate(platform)

    first = gate.request_consent()
    platform.pending_consents[0].cancel()

    assert first.result(timeout=1) is PermissionState.REQUIRED
    assert isinstance(gate.last_error, ConsentError)
    assert platform.alerts

    platform.consent_response = GRANTED
    second = gate.request_consent()

    assert second is not first
    assert second.result(timeout=1) is PermissionState.GRANTED
    assert platform.consent_calls == 2


def test_failing_stream_open_keeps_gate_retryable():
    platform = MockPlatform(requires_consent=True, consent_response=GRANTED)
    on_granted = Mock(side_effect=[RuntimeError("listener registration failed"), None])
    gate = PermissionGate(platform, on_granted=on_granted)

    assert gate.request_consent().result(timeout=1) is PermissionState.REQUIRED
    assert not gate.streams_allowed
    assert isinstance(gate.last_error.cause, RuntimeError)

    assert gate.request_consent().result(timeout=1) is PermissionState.GRANTED
    assert on_granted.call_count == 2
    assert platform.consent_calls == 2


def test_failing_alert_still_releases_the_request():
    platform = MockPlatform(requires_consent=True, consent_response=DENIED)
    platform.alert = Mock(side_effect=RuntimeError("alert unavailable"))
    gate = PermissionGate(platform)

    assert gate.request_consent().result(timeout=1) is PermissionState.REQUIRED
    assert gate.request_consent().result(timeout=1) is PermissionState.REQUIRED
    assert platform.consent_calls == 2


def test_consent_again_while_granted_is_noop():
    platform = MockPlatform(requires_consent=True, consent_response=GRANTED)
    on_granted = Mock()
    gate = PermissionGate(platform, on_granted=on_granted)
    gate.request_consent().result(timeout=1)

    again = gate.request_consent()

    assert again.result(timeout=1) is PermissionState.GRANTED
    assert platform.consent_calls == 1
    on_granted.assert_called_once()


def test_consent_when_not_required_is_noop():
    platform = MockPlatform(requires_consent=False)
    gate = PermissionGate(platform)

    assert gate.request_consent().result(timeout=1) is PermissionState.NOT_REQUIRED
    assert platform.consent_calls == 0


def test_resolve_without_pending_request_raises():
    with pytest.raises(RuntimeError):
        MockPlatform().resolve_consent()
