"""
OpenCV webcam capture adapter.
CAMERA_INDEX env var (default 0) selects the webcam device.
OpenCV has no torch control, so tracks report no torch capability.
"""
import os

import cv2
import numpy as np

from recyclopedia.adapters.camera.base import CameraAdapter, CameraStream, CameraTrack
from recyclopedia.orchestrator.errors import CameraPermissionError, CameraUnavailableError


class CV2Track(CameraTrack):
    def __init__(self, cap):
        self._cap = cap

    def stop(self):
        if self._cap is not None and self._cap.isOpened():
            self._cap.release()

    @property
    def live(self) -> bool:
        return self._cap is not None and self._cap.isOpened()


class CV2Stream(CameraStream):
    def __init__(self, cap):
        self._cap = cap
        self._track = CV2Track(cap)

    def tracks(self) -> list[CameraTrack]:
        return [self._track]

    @property
    def resolution(self) -> tuple[int, int]:
        w = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        h = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        return w, h

    def read_frame(self) -> np.ndarray | None:
        if not self._track.live:
            return None
        ret, frame = self._cap.read()
        if not ret or frame is None:
            return None
        return frame


class CV2Camera(CameraAdapter):
    def __init__(self, status_store, index: int | None = None):
        self.status = status_store
        self._index = index if index is not None else int(os.getenv("CAMERA_INDEX", "0"))

    def open_stream(self, facing_mode: str = "environment") -> CameraStream:
        self.status.log(f"cv2_camera: opening device {self._index} (facing={facing_mode})")
        try:
            cap = cv2.VideoCapture(self._index)
        except PermissionError as e:
            raise CameraPermissionError(str(e)) from e
        if not cap.isOpened():
            cap.release()
            self.status.log(f"cv2_camera: failed to open device {self._index}")
            raise CameraUnavailableError(f"camera device {self._index} could not be opened")
        return CV2Stream(cap)
