"""
Development API server (long-running listener).

Usage:
    recyclopedia-server
    VISION_ADAPTER=mock recyclopedia-server     # no API key needed
"""
import uvicorn

from recyclopedia.services.settings import load_settings


def main():
    settings = load_settings()
    print(f"Dev API server running on http://localhost:{settings.api_port}")
    print(f"API endpoint: http://localhost:{settings.api_port}/api/classify")
    print(f"Vision adapter: {settings.vision_adapter}")
    uvicorn.run("recyclopedia.services.api:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
