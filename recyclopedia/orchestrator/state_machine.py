import time

from recyclopedia.adapters.camera.base import torch_supported
from recyclopedia.adapters.camera.frames import JPEG_QUALITY, encode_data_url
from recyclopedia.orchestrator import contracts as C
from recyclopedia.orchestrator import errors
from recyclopedia.orchestrator.contracts import SessionState


class ScanController:
    """
    Camera/session finite-state machine:

      idle -> requesting -> scanning -> processing -> result | error -> idle

    Single-threaded. Every operation returns True if it was accepted in the
    current phase; refused operations are logged and leave state untouched.
    """

    def __init__(self, camera, classifier, status_store, on_change=None):
        self.camera = camera
        self.classifier = classifier
        self.status = status_store
        self.state = SessionState()
        self._on_change = on_change

    @property
    def phase(self) -> str:
        return self.state.phase

    def _set_phase(self, phase: str):
        prev = self.state.phase
        self.state.phase = phase
        self.status.log(f"controller: {prev} -> {phase}")
        if self._on_change is not None:
            self._on_change(self.state)

    def _fail(self, message: str):
        self.state.last_result = None
        self.state.last_error = message
        self._set_phase(C.ERROR)

    def _refuse(self, action: str) -> bool:
        self.status.log(f"controller: {action} ignored in phase={self.state.phase}")
        return False

    def start_scan(self) -> bool:
        if self.state.phase != C.IDLE:
            return self._refuse("start_scan")

        self.state.last_error = None
        self._set_phase(C.REQUESTING)
        try:
            stream = self.camera.open_stream(facing_mode="environment")
            self.state.active_stream = stream
            tracks = stream.video_tracks()
            track = tracks[0] if tracks else None
            self.state.flash_supported = torch_supported(track)
            self.state.flash_engaged = False
            self.status.log(f"controller: camera granted flash_supported={self.state.flash_supported}")
            self._set_phase(C.SCANNING)
            return True
        except errors.CameraPermissionError as e:
            self.status.log(f"controller: camera denied: {e}")
            self._stop_camera()
            self._fail(errors.MSG_CAMERA_DENIED)
        except Exception as e:
            self.status.log(f"controller: camera error {type(e).__name__}: {e}")
            self._stop_camera()
            self._fail(errors.MSG_CAMERA_FAILED)
        return True

    def toggle_flash(self) -> bool:
        """Best effort; a failed toggle is recorded in state.flash_error only."""
        if self.state.phase != C.SCANNING:
            return self._refuse("toggle_flash")
        track = self._video_track()
        if track is None or not self.state.flash_supported:
            return self._refuse("toggle_flash")

        want = not self.state.flash_engaged
        try:
            track.apply_torch(want)
            self.state.flash_engaged = want
            self.state.flash_error = None
            self.status.log(f"controller: flash {'on' if want else 'off'}")
        except Exception as e:
            self.state.flash_error = str(e)
            self.status.log(f"controller: flash toggle failed: {e}")
        return True

    def capture_and_classify(self) -> bool:
        if self.state.phase != C.SCANNING or self.state.active_stream is None:
            return self._refuse("capture")

        self._set_phase(C.PROCESSING)
        t0 = time.time()
        stream = self.state.active_stream
        try:
            try:
                # frame grab and encode must happen before the tracks are stopped
                frame = stream.read_frame()
                if frame is None or frame.size == 0:
                    raise errors.CaptureError("no frame available from the live stream")
                w, h = stream.resolution
                self.status.log(f"controller: snapshot {frame.shape[1]}x{frame.shape[0]} (native {w}x{h})")
                data_url = encode_data_url(frame.copy(), quality=JPEG_QUALITY)
            finally:
                self._stop_camera()
        except Exception as e:
            self.status.log(f"controller: capture failed {type(e).__name__}: {e}")
            self._fail(errors.MSG_CAPTURE_FAILED)
            return True

        self.state.last_snapshot = data_url
        try:
            result = self.classifier.classify(data_url)
        except errors.ClassificationError as e:
            self.status.log(f"controller: classification error: {e.user_message}")
            self._fail(e.user_message)
            return True
        except Exception as e:
            self.status.log(f"controller: unexpected error {type(e).__name__}: {e}")
            self._fail(errors.MSG_UNKNOWN)
            return True

        dt = int((time.time() - t0) * 1000)
        if result is None:
            self.status.log(f"controller: no item detected dt={dt}ms")
            self._fail(errors.MSG_NO_ITEM)
            return True

        self.status.log(f"controller: {result.item_name} -> {result.bin.value} dt={dt}ms")
        self.state.last_error = None
        self.state.last_result = result
        self._set_phase(C.RESULT)
        return True

    def cancel(self) -> bool:
        if self.state.phase != C.SCANNING:
            return self._refuse("cancel")
        self._stop_camera()
        self._set_phase(C.IDLE)
        return True

    def reset(self) -> bool:
        self._stop_camera()
        self.state.last_result = None
        self.state.last_error = None
        self.state.last_snapshot = None
        self.state.flash_error = None
        if self.state.phase != C.IDLE:
            self._set_phase(C.IDLE)
        return True

    def _video_track(self):
        stream = self.state.active_stream
        if stream is None:
            return None
        tracks = stream.video_tracks()
        return tracks[0] if tracks else None

    def _stop_camera(self):
        """Idempotent teardown: torch off (best effort), stop every track, clear flash state."""
        stream = self.state.active_stream
        if stream is not None:
            if self.state.flash_supported and self.state.flash_engaged:
                track = self._video_track()
                try:
                    if track is not None:
                        track.apply_torch(False)
                except Exception as e:
                    self.status.log(f"controller: could not turn off flash: {e}")
            for track in stream.tracks():
                try:
                    track.stop()
                except Exception as e:
                    self.status.log(f"controller: track stop failed: {e}")
            self.status.log("controller: camera released")
        self.state.active_stream = None
        self.state.flash_supported = False
        self.state.flash_engaged = False
