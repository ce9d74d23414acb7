"""
KIMI (Moonshot AI) vision gateway over its OpenAI-compatible chat API.
Requires KIMI_API_KEY. Uses httpx directly, no SDK.
"""
import httpx

from recyclopedia.adapters.vision.base import InlineImage, ModelGateway

KIMI_API_URL = "https://api.moonshot.cn/v1/chat/completions"


class KimiGateway(ModelGateway):
    name = "kimi"

    def __init__(self, status_store, api_key: str | None, model: str = "moonshot-v1-8k-vision-preview",
                 timeout: float = 30.0, client: httpx.Client | None = None):
        self.status = status_store
        self.model = model
        self._api_key = api_key
        self._http = client or httpx.Client(timeout=timeout)
        if self._api_key:
            self.status.log(f"kimi_vision: ready (model={model})")
        else:
            self.status.log("kimi_vision: KIMI_API_KEY not set")

    @property
    def ready(self) -> bool:
        return bool(self._api_key)

    def generate(self, prompt: str, image: InlineImage, schema: dict | None = None) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{image.mime_type};base64,{image.data_b64}"},
                        },
                        {"type": "text", "text": prompt},
                    ],
                }
            ],
            "temperature": 0.4,
        }
        if schema is not None:
            payload["response_format"] = {"type": "json_object"}
        headers = {"Authorization": f"Bearer {self._api_key}"}
        resp = self._http.post(KIMI_API_URL, json=payload, headers=headers)
        if not resp.is_success:
            self.status.log(f"kimi_vision: HTTP {resp.status_code} - {resp.text[:300]}")
        resp.raise_for_status()
        return resp.json()["choices"][0]["message"]["content"] or ""
