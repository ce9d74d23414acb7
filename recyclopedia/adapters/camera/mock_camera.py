"""Mock camera: serves a still image (MOCK_CAMERA_IMAGE) or a synthetic frame."""
import os
from pathlib import Path

import cv2
import numpy as np

from recyclopedia.adapters.camera.base import CameraAdapter, CameraStream, CameraTrack
from recyclopedia.orchestrator.errors import CameraPermissionError, CameraUnavailableError


class MockTrack(CameraTrack):
    def __init__(self, events: list[str], torch: bool = False, fail_torch: bool = False):
        self._events = events
        self._torch = torch
        self._fail_torch = fail_torch
        self._live = True
        self.torch_on = False

    def capabilities(self) -> dict:
        return {"torch": True} if self._torch else {}

    def apply_torch(self, on: bool):
        if not self._torch:
            raise NotImplementedError("torch control not available on this track")
        if self._fail_torch or not self._live:
            raise RuntimeError("torch constraint rejected")
        self.torch_on = on
        self._events.append(f"torch:{'on' if on else 'off'}")

    def stop(self):
        self._live = False
        self.torch_on = False
        self._events.append("stop")

    @property
    def live(self) -> bool:
        return self._live


class MockStream(CameraStream):
    def __init__(self, frame: np.ndarray, events: list[str], torch: bool, fail_torch: bool):
        self._frame = frame
        self._events = events
        self._track = MockTrack(events, torch=torch, fail_torch=fail_torch)

    def tracks(self) -> list[CameraTrack]:
        return [self._track]

    @property
    def resolution(self) -> tuple[int, int]:
        h, w = self._frame.shape[:2]
        return w, h

    def read_frame(self) -> np.ndarray | None:
        if not self._track.live:
            self._events.append("read:stale")
            return None
        self._events.append("read")
        return self._frame


class MockCamera(CameraAdapter):
    """
    deny=True raises CameraPermissionError, broken=True raises CameraUnavailableError.
    `events` records read/stop/torch calls across every stream this camera opens.
    """

    def __init__(self, status_store, image_path: str | None = None, torch: bool = False,
                 fail_torch: bool = False, deny: bool = False, broken: bool = False,
                 size: tuple[int, int] = (640, 480)):
        self.status = status_store
        self.torch = torch
        self.fail_torch = fail_torch
        self.deny = deny
        self.broken = broken
        self.events: list[str] = []
        self.streams: list[MockStream] = []
        self._frame = self._load_frame(image_path or os.getenv("MOCK_CAMERA_IMAGE"), size)

    def _load_frame(self, image_path: str | None, size: tuple[int, int]) -> np.ndarray:
        if image_path:
            path = Path(image_path)
            frame = cv2.imread(str(path)) if path.is_file() else None
            if frame is not None:
                self.status.log(f"mock_camera: serving {path.name}")
                return frame
            self.status.log(f"mock_camera: could not read {image_path}, using synthetic frame")
        w, h = size
        frame = np.full((h, w, 3), 235, dtype=np.uint8)
        cv2.rectangle(frame, (w // 3, h // 4), (2 * w // 3, 3 * h // 4), (180, 120, 40), -1)
        return frame

    def open_stream(self, facing_mode: str = "environment") -> CameraStream:
        self.events.append(f"open:{facing_mode}")
        if self.deny:
            raise CameraPermissionError("permission denied")
        if self.broken:
            raise CameraUnavailableError("no camera")
        stream = MockStream(self._frame, self.events, torch=self.torch, fail_torch=self.fail_torch)
        self.streams.append(stream)
        return stream
