from dataclasses import dataclass


@dataclass(frozen=True)
class InlineImage:
    mime_type: str
    data_b64: str


class ModelGateway:
    """Given an image and an instruction, return the model's text reply."""
    name = "base"

    @property
    def ready(self) -> bool:
        """True when the provider credential is configured."""
        return False

    def generate(self, prompt: str, image: InlineImage, schema: dict | None = None) -> str:
        """One model call. Raises on any upstream failure.

        `schema` is a JSON schema for providers with a native structured-output
        mode; other providers ignore it and rely on the prompt.
        """
        raise NotImplementedError
