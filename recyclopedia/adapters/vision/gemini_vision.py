"""
Gemini vision gateway (google-genai SDK).

Requires GEMINI_API_KEY. Model is GEMINI_MODEL (default gemini-2.0-flash).
"""
import base64

from google import genai
from google.genai import types

from recyclopedia.adapters.vision.base import InlineImage, ModelGateway

_GENERATION = dict(temperature=0.4, top_k=32, top_p=1.0, max_output_tokens=8192)


class GeminiGateway(ModelGateway):
    name = "gemini"

    def __init__(self, status_store, api_key: str | None, model: str = "gemini-2.0-flash"):
        self.status = status_store
        self.model = model
        self._client = None
        if not api_key:
            self.status.log("gemini_vision: GEMINI_API_KEY not set")
            return
        self._client = genai.Client(api_key=api_key)
        self.status.log(f"gemini_vision: ready (model={model})")

    @property
    def ready(self) -> bool:
        return self._client is not None

    def generate(self, prompt: str, image: InlineImage, schema: dict | None = None) -> str:
        if self._client is None:
            raise RuntimeError("gemini client not configured")
        options = dict(_GENERATION)
        if schema is not None:
            options.update(response_mime_type="application/json", response_schema=schema)
        config = types.GenerateContentConfig(**options)
        part = types.Part.from_bytes(data=base64.b64decode(image.data_b64), mime_type=image.mime_type)
        response = self._client.models.generate_content(
            model=self.model,
            contents=[part, prompt],
            config=config,
        )
        return response.text or ""
