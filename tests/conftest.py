from __future__ import annotations

import json

import numpy as np
import pytest

from recyclopedia.adapters.camera.frames import encode_data_url
from recyclopedia.adapters.camera.mock_camera import MockCamera
from recyclopedia.adapters.vision.mock_vision import MockGateway
from recyclopedia.services.classification import ClassificationService
from recyclopedia.services.status_store import StatusStore

BOTTLE_REPLY = json.dumps(
    {
        "itemName": "Plastic Water Bottle",
        "bin": "RECYCLING",
        "reason": "PET #1 bottles are accepted curbside once emptied.",
        "alternatives": ["Refill it for watering plants", "Cut it into a seedling pot"],
    }
)


@pytest.fixture
def status() -> StatusStore:
    return StatusStore()


@pytest.fixture
def image_data_url() -> str:
    frame = np.full((48, 64, 3), 128, dtype=np.uint8)
    return encode_data_url(frame)


@pytest.fixture
def make_service(status):
    def _make(replies=None, ready: bool = True, expose_debug: bool = False):
        gateway = MockGateway(status, replies=replies if replies is not None else ["VALID", BOTTLE_REPLY],
                              ready=ready)
        return ClassificationService(gateway, status, expose_debug=expose_debug)

    return _make


@pytest.fixture
def camera(status) -> MockCamera:
    return MockCamera(status, torch=True)
