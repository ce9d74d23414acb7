"""
HTTP client for the classification service.

  Request:  POST /api/classify  {"imageData": "data:<mime>;base64,<data>"}
  Response: 200 {itemName, bin, reason, alternatives}
            400 {error, code="NO_ITEM_DETECTED"}  -> None (retake the photo)
            4xx/5xx {error, code}                 -> ClassificationError(error)

One round trip per call; retrying is up to the caller.
"""
import httpx

from recyclopedia.adapters.classify.base import Classifier
from recyclopedia.orchestrator import errors
from recyclopedia.orchestrator.contracts import ClassificationResult

REQUIRED_FIELDS = ("itemName", "bin", "reason")


class HttpClassifier(Classifier):
    def __init__(self, status_store, base_url: str = "http://localhost:3001", timeout: float = 30.0,
                 client: httpx.Client | None = None):
        self.status = status_store
        self.base_url = base_url.rstrip("/")
        self._http = client or httpx.Client(timeout=timeout)

    def classify(self, image_data_url: str) -> ClassificationResult | None:
        url = f"{self.base_url}/api/classify"
        self.status.log(f"http_classifier: POST /api/classify ({len(image_data_url)} chars)")
        try:
            resp = self._http.post(url, json={"imageData": image_data_url})
        except httpx.HTTPError as e:
            self.status.log(f"http_classifier: transport error {type(e).__name__}: {e}")
            raise errors.ClassificationError(errors.MSG_CLASSIFY_FAILED) from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.status_code == 200:
            return self._parse_result(data)

        body = data if isinstance(data, dict) else {}
        if body.get("debug") is not None:
            self.status.log(f"http_classifier: debug={body['debug']}")

        if resp.status_code == 400 and body.get("code") == errors.ERR_NO_ITEM_DETECTED:
            self.status.log("http_classifier: no item detected")
            return None

        message = body.get("error")
        self.status.log(f"http_classifier: HTTP {resp.status_code} code={body.get('code')} error={message!r}")
        if not isinstance(message, str) or not message.strip():
            message = errors.MSG_CLASSIFY_FAILED
        raise errors.ClassificationError(message, debug=body.get("debug"))

    def _parse_result(self, data) -> ClassificationResult:
        if not isinstance(data, dict):
            self.status.log("http_classifier: success response is not a JSON object")
            raise errors.ClassificationError(errors.MSG_CLASSIFY_FAILED)
        missing = [k for k in REQUIRED_FIELDS if not data.get(k)]
        if missing:
            self.status.log(f"http_classifier: response missing {missing}")
            raise errors.ClassificationError(errors.MSG_CLASSIFY_FAILED)
        return ClassificationResult.from_wire(data)

    def close(self):
        self._http.close()
