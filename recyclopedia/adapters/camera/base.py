from abc import ABC, abstractmethod

import numpy as np


class CameraTrack(ABC):
    """One media track of a live stream. Torch control is optional."""
    kind = "video"

    def capabilities(self) -> dict:
        return {}

    def apply_torch(self, on: bool):
        raise NotImplementedError("torch control not available on this track")

    @abstractmethod
    def stop(self):
        ...

    @property
    @abstractmethod
    def live(self) -> bool:
        ...


class CameraStream(ABC):
    @abstractmethod
    def tracks(self) -> list[CameraTrack]:
        ...

    def video_tracks(self) -> list[CameraTrack]:
        return [t for t in self.tracks() if t.kind == "video"]

    @property
    @abstractmethod
    def resolution(self) -> tuple[int, int]:
        """Native (width, height) of the video."""
        ...

    @abstractmethod
    def read_frame(self) -> np.ndarray | None:
        """Current frame as a BGR array at native resolution, or None."""
        ...


class CameraAdapter(ABC):
    @abstractmethod
    def open_stream(self, facing_mode: str = "environment") -> CameraStream:
        """Acquire a video-only stream.

        Raises CameraPermissionError when access is refused and
        CameraUnavailableError when no device can be opened.
        """
        ...


def torch_supported(track: CameraTrack | None) -> bool:
    if track is None:
        return False
    try:
        return bool(track.capabilities().get("torch"))
    except Exception:
        return False
