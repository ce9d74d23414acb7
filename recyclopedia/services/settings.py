"""
Process configuration. Values come from the environment, with `.env.local`
and `.env` filling in anything not already set.
"""
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv(dotenv_path=".env.local", override=False)
load_dotenv(dotenv_path=".env", override=False)


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    vision_adapter: str = "gemini"
    gemini_api_key: str | None = None
    anthropic_api_key: str | None = None
    kimi_api_key: str | None = None
    gemini_model: str = "gemini-2.0-flash"
    claude_model: str = "claude-haiku-4-5-20251001"
    kimi_model: str = "moonshot-v1-8k-vision-preview"
    debug_responses: bool = False
    api_host: str = "0.0.0.0"
    api_port: int = 3001
    cors_origins: tuple[str, ...] = ("*",)
    api_url: str = "http://localhost:3001"


def load_settings() -> Settings:
    origins = tuple(o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip())
    return Settings(
        vision_adapter=os.getenv("VISION_ADAPTER", "gemini").lower(),
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        kimi_api_key=os.getenv("KIMI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", Settings.gemini_model),
        claude_model=os.getenv("CLAUDE_MODEL", Settings.claude_model),
        kimi_model=os.getenv("KIMI_MODEL", Settings.kimi_model),
        debug_responses=_flag("DEBUG_RESPONSES"),
        api_host=os.getenv("API_HOST", Settings.api_host),
        api_port=int(os.getenv("API_PORT", str(Settings.api_port))),
        cors_origins=origins or ("*",),
        api_url=os.getenv("RECYCLOPEDIA_API_URL", Settings.api_url),
    )
