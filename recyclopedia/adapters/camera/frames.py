"""
Still-frame codec: BGR frame -> JPEG data URL, and data URL -> (mime, base64).
"""
import base64
import re

import cv2
import numpy as np

JPEG_QUALITY = 0.9

_DATA_URL_RE = re.compile(r"^data:(.+);base64,(.+)$", re.DOTALL)


def encode_data_url(frame: np.ndarray, quality: float = JPEG_QUALITY) -> str:
    ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, int(round(quality * 100))])
    if not ok:
        raise ValueError("JPEG encoding failed")
    b64 = base64.standard_b64encode(buf.tobytes()).decode("ascii")
    return f"data:image/jpeg;base64,{b64}"


def parse_data_url(data_url: str) -> tuple[str, str] | None:
    """Split "data:<mime>;base64,<data>" into (mime, data); None if it doesn't match."""
    m = _DATA_URL_RE.match(data_url)
    if not m:
        return None
    return m.group(1), m.group(2)
