"""
Claude vision gateway (anthropic SDK).

Requires ANTHROPIC_API_KEY. Model is CLAUDE_MODEL (default claude-haiku-4-5).
Claude has no response-schema mode here; the classification prompt asks for
bare JSON and the service parses it defensively.
"""
import anthropic

from recyclopedia.adapters.vision.base import InlineImage, ModelGateway


class ClaudeGateway(ModelGateway):
    name = "claude"

    def __init__(self, status_store, api_key: str | None, model: str = "claude-haiku-4-5-20251001"):
        self.status = status_store
        self.model = model
        self._client = None
        if not api_key:
            self.status.log("claude_vision: ANTHROPIC_API_KEY not set")
            return
        self._client = anthropic.Anthropic(api_key=api_key)
        self.status.log(f"claude_vision: ready (model={model})")

    @property
    def ready(self) -> bool:
        return self._client is not None

    def generate(self, prompt: str, image: InlineImage, schema: dict | None = None) -> str:
        if self._client is None:
            raise RuntimeError("anthropic client not configured")
        message = self._client.messages.create(
            model=self.model,
            max_tokens=1024,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": image.mime_type,
                                "data": image.data_b64,
                            },
                        },
                        {"type": "text", "text": prompt},
                    ],
                }
            ],
        )
        return "".join(block.text for block in message.content if getattr(block, "type", None) == "text")
