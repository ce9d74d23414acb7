from typing import Optional

# Error codes carried in the "code" field of service error bodies
ERR_METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
ERR_INVALID_REQUEST = "INVALID_REQUEST"
ERR_NO_ITEM_DETECTED = "NO_ITEM_DETECTED"
ERR_CONFIG = "CONFIG_ERROR"
ERR_UPSTREAM = "UPSTREAM_ERROR"
ERR_INTERNAL = "INTERNAL_ERROR"

# User-facing messages
MSG_CAMERA_DENIED = "Camera access denied. Please enable camera permissions and try again."
MSG_CAMERA_FAILED = "Could not start the camera. Please check that it is connected and try again."
MSG_CAPTURE_FAILED = "Could not capture a photo. Please try again."
MSG_NO_ITEM = "Could not identify a recyclable item. Please center the item and try again."
MSG_UNKNOWN = "An unknown error occurred."
MSG_CLASSIFY_FAILED = "Failed to classify the item. Please try again."


class CameraPermissionError(Exception):
    """The user or the platform refused camera access."""


class CameraUnavailableError(Exception):
    """No usable camera device could be opened."""


class CaptureError(Exception):
    """The live stream did not yield a frame."""


class ClassificationError(Exception):
    """Classification failed; `user_message` is safe to show to the end user."""

    def __init__(self, user_message: str, debug: Optional[dict] = None):
        super().__init__(user_message)
        self.user_message = user_message
        self.debug = debug
