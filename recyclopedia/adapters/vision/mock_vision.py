import json

from recyclopedia.adapters.vision.base import InlineImage, ModelGateway

DEFAULT_REPLIES = [
    "VALID",
    json.dumps({
        "itemName": "Plastic Water Bottle",
        "bin": "RECYCLING",
        "reason": "PET #1 bottles are accepted curbside once emptied.",
        "alternatives": ["Refill it for watering plants", "Cut it into a seedling pot"],
    }),
]


class MockGateway(ModelGateway):
    """
    Scripted gateway. `replies` is a list consumed in order (cycling when
    exhausted) or a callable (prompt, image, schema) -> str. An Exception
    instance in the list is raised instead of returned.
    """
    name = "mock"

    def __init__(self, status_store, replies=None, ready: bool = True):
        self.status = status_store
        self._replies = replies if replies is not None else list(DEFAULT_REPLIES)
        self._ready = ready
        self.calls: list[tuple[str, InlineImage, dict | None]] = []

    @property
    def ready(self) -> bool:
        return self._ready

    def generate(self, prompt: str, image: InlineImage, schema: dict | None = None) -> str:
        self.calls.append((prompt, image, schema))
        if callable(self._replies):
            reply = self._replies(prompt, image, schema)
        else:
            reply = self._replies[(len(self.calls) - 1) % len(self._replies)]
        if isinstance(reply, Exception):
            raise reply
        self.status.log(f"mock_vision: reply {str(reply)[:60]!r}")
        return reply
