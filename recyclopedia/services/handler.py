"""
Request/response binding for serverless-style hosting.

The host passes the HTTP method and the decoded JSON body and sends back
the returned (status_code, body). The gateway is built once per process.
"""
import threading

from recyclopedia.adapters.vision.factory import build_gateway
from recyclopedia.services.classification import ClassificationService
from recyclopedia.services.settings import load_settings
from recyclopedia.services.status_store import StatusStore

_service: ClassificationService | None = None
_service_lock = threading.Lock()


def get_service() -> ClassificationService:
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                settings = load_settings()
                status = StatusStore()
                _service = ClassificationService(build_gateway(status, settings), status,
                                                 expose_debug=settings.debug_responses)
    return _service


def handler(method: str, body) -> tuple[int, dict]:
    resp = get_service().handle(method, body)
    return resp.status_code, resp.body
