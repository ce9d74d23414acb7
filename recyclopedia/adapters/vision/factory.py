"""
Gateway selection: VISION_ADAPTER = gemini | claude | kimi | mock  (default: gemini)

A gateway without its credential is still returned so that requests get
a configuration error instead of silently hitting a mock.
"""
from recyclopedia.adapters.vision.base import ModelGateway
from recyclopedia.services.settings import Settings, load_settings


def build_gateway(status_store, settings: Settings | None = None) -> ModelGateway:
    settings = settings or load_settings()
    adapter = settings.vision_adapter

    if adapter == "claude":
        from recyclopedia.adapters.vision.claude_vision import ClaudeGateway
        gateway = ClaudeGateway(status_store, settings.anthropic_api_key, model=settings.claude_model)
    elif adapter == "kimi":
        from recyclopedia.adapters.vision.kimi_vision import KimiGateway
        gateway = KimiGateway(status_store, settings.kimi_api_key, model=settings.kimi_model)
    elif adapter == "mock":
        from recyclopedia.adapters.vision.mock_vision import MockGateway
        gateway = MockGateway(status_store)
    else:
        if adapter != "gemini":
            status_store.log(f"vision: unknown adapter {adapter!r}, using gemini")
        from recyclopedia.adapters.vision.gemini_vision import GeminiGateway
        gateway = GeminiGateway(status_store, settings.gemini_api_key, model=settings.gemini_model)

    if not gateway.ready:
        status_store.log(f"vision: {gateway.name} has no API key - classify requests will fail with 500")
    status_store.log(f"vision adapter: {type(gateway).__name__}")
    return gateway
