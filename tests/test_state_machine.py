from __future__ import annotations

import base64

import pytest

from recyclopedia.adapters.camera.frames import parse_data_url
from recyclopedia.adapters.camera.mock_camera import MockCamera
from recyclopedia.orchestrator import contracts as C
from recyclopedia.orchestrator import errors
from recyclopedia.orchestrator.contracts import BinType, ClassificationResult
from recyclopedia.orchestrator.state_machine import ScanController

BOTTLE = ClassificationResult(
    item_name="Plastic Water Bottle",
    bin=BinType.RECYCLING,
    reason="PET #1 bottles are accepted curbside.",
    alternatives=["Refill it"],
)


class FakeClassifier:
    def __init__(self, outcome=BOTTLE, camera: MockCamera | None = None):
        self.outcome = outcome
        self.camera = camera
        self.calls: list[str] = []
        self.events_at_call: list[str] = []

    def classify(self, image_data_url):
        self.calls.append(image_data_url)
        if self.camera is not None:
            self.events_at_call = list(self.camera.events)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def _assert_invariants(state: C.SessionState):
    if state.phase == C.RESULT:
        assert state.last_result is not None and state.last_error is None
    elif state.phase == C.ERROR:
        assert state.last_error is not None and state.last_result is None
    else:
        assert state.last_result is None and state.last_error is None
    # processing releases the camera as its entry action
    if state.phase not in (C.SCANNING, C.PROCESSING):
        assert state.active_stream is None


@pytest.fixture
def observed():
    return []


def _controller(camera, classifier, status, observed):
    def on_change(state):
        observed.append(state.phase)
        _assert_invariants(state)

    return ScanController(camera, classifier, status, on_change=on_change)


def test_bottle_scenario_reaches_result(camera, status, observed):
    classifier = FakeClassifier(camera=camera)
    ctrl = _controller(camera, classifier, status, observed)

    assert ctrl.start_scan()
    assert ctrl.phase == C.SCANNING
    assert ctrl.state.flash_supported
    assert camera.events[0] == "open:environment"

    assert ctrl.capture_and_classify()
    assert ctrl.phase == C.RESULT
    assert ctrl.state.last_result == BOTTLE
    assert observed == [C.REQUESTING, C.SCANNING, C.PROCESSING, C.RESULT]


def test_frame_is_grabbed_before_camera_stops(camera, status, observed):
    classifier = FakeClassifier(camera=camera)
    ctrl = _controller(camera, classifier, status, observed)
    ctrl.start_scan()
    ctrl.capture_and_classify()

    # read happens first, track already stopped by the time the request is sent
    assert classifier.events_at_call[1:] == ["read", "stop"]
    assert "read:stale" not in camera.events
    mime, data = parse_data_url(classifier.calls[0])
    assert mime == "image/jpeg"
    assert base64.b64decode(data)[:2] == b"\xff\xd8"
    assert not camera.streams[0].tracks()[0].live


def test_no_item_reaches_retake_error(camera, status, observed):
    ctrl = _controller(camera, FakeClassifier(outcome=None), status, observed)
    ctrl.start_scan()
    ctrl.capture_and_classify()
    assert ctrl.phase == C.ERROR
    assert ctrl.state.last_error == errors.MSG_NO_ITEM


def test_classification_error_message_is_shown(camera, status, observed):
    failure = errors.ClassificationError("Failed to classify item")
    ctrl = _controller(camera, FakeClassifier(outcome=failure), status, observed)
    ctrl.start_scan()
    ctrl.capture_and_classify()
    assert ctrl.phase == C.ERROR
    assert ctrl.state.last_error == "Failed to classify item"


def test_unexpected_classifier_exception(camera, status, observed):
    ctrl = _controller(camera, FakeClassifier(outcome=KeyError("x")), status, observed)
    ctrl.start_scan()
    ctrl.capture_and_classify()
    assert ctrl.state.last_error == errors.MSG_UNKNOWN


def test_permission_denied(status, observed):
    camera = MockCamera(status, deny=True)
    ctrl = _controller(camera, FakeClassifier(), status, observed)
    ctrl.start_scan()
    assert ctrl.phase == C.ERROR
    assert ctrl.state.last_error == errors.MSG_CAMERA_DENIED
    assert observed == [C.REQUESTING, C.ERROR]


def test_generic_camera_failure(status, observed):
    camera = MockCamera(status, broken=True)
    ctrl = _controller(camera, FakeClassifier(), status, observed)
    ctrl.start_scan()
    assert ctrl.phase == C.ERROR
    assert ctrl.state.last_error == errors.MSG_CAMERA_FAILED


def test_flash_toggle_and_teardown(camera, status, observed):
    ctrl = _controller(camera, FakeClassifier(), status, observed)
    ctrl.start_scan()
    track = camera.streams[0].tracks()[0]

    ctrl.toggle_flash()
    assert ctrl.state.flash_engaged and track.torch_on

    ctrl.capture_and_classify()
    assert camera.events[-2:] == ["torch:off", "stop"]
    assert not ctrl.state.flash_engaged
    assert not ctrl.state.flash_supported


def test_flash_failure_does_not_block_scan(status, observed):
    camera = MockCamera(status, torch=True, fail_torch=True)
    ctrl = _controller(camera, FakeClassifier(), status, observed)
    ctrl.start_scan()
    ctrl.toggle_flash()
    assert ctrl.phase == C.SCANNING
    assert ctrl.state.flash_error
    assert not ctrl.state.flash_engaged

    ctrl.capture_and_classify()
    assert ctrl.phase == C.RESULT


def test_flash_on_stopped_track_is_swallowed(camera, status, observed):
    ctrl = _controller(camera, FakeClassifier(), status, observed)
    ctrl.start_scan()
    ctrl.toggle_flash()
    camera.streams[0].tracks()[0].stop()     # track dies underneath us
    ctrl.toggle_flash()
    assert ctrl.phase == C.SCANNING
    assert ctrl.state.flash_error
    ctrl.cancel()
    assert ctrl.phase == C.IDLE


def test_flash_without_torch_is_refused(status, observed):
    camera = MockCamera(status, torch=False)
    ctrl = _controller(camera, FakeClassifier(), status, observed)
    ctrl.start_scan()
    assert not ctrl.state.flash_supported
    assert not ctrl.toggle_flash()


def test_scan_reset_scan_leaves_no_live_track(camera, status, observed):
    ctrl = _controller(camera, FakeClassifier(), status, observed)
    ctrl.start_scan()
    ctrl.toggle_flash()
    ctrl.capture_and_classify()
    ctrl.reset()

    assert ctrl.phase == C.IDLE
    assert all(not t.live for s in camera.streams for t in s.tracks())
    assert not ctrl.state.flash_supported and not ctrl.state.flash_engaged
    assert ctrl.state.last_snapshot is None

    ctrl.start_scan()
    ctrl.reset()
    ctrl.reset()   # idempotent
    assert len(camera.streams) == 2
    assert all(not t.live for s in camera.streams for t in s.tracks())


def test_cancel_releases_camera(camera, status, observed):
    ctrl = _controller(camera, FakeClassifier(), status, observed)
    ctrl.start_scan()
    assert ctrl.cancel()
    assert ctrl.phase == C.IDLE
    assert camera.events[-1] == "stop"


def test_failed_frame_grab_releases_camera(camera, status, observed):
    ctrl = _controller(camera, FakeClassifier(), status, observed)
    ctrl.start_scan()
    camera.streams[0].read_frame = lambda: None
    ctrl.capture_and_classify()
    assert ctrl.phase == C.ERROR
    assert ctrl.state.last_error == errors.MSG_CAPTURE_FAILED
    assert not camera.streams[0].tracks()[0].live


def test_operations_refused_outside_their_phase(camera, status, observed):
    classifier = FakeClassifier()
    ctrl = _controller(camera, classifier, status, observed)
    assert not ctrl.capture_and_classify()
    assert not ctrl.toggle_flash()
    assert not ctrl.cancel()
    ctrl.start_scan()
    assert not ctrl.start_scan()
    ctrl.capture_and_classify()
    assert not ctrl.capture_and_classify()
    assert len(classifier.calls) == 1
