"""
Two-stage classification protocol.

  1. pre-check: does the frame show one clear disposal-worthy item? (VALID / INVALID)
  2. classify:  four-field JSON (itemName, bin, reason, alternatives)

`ClassificationService.handle` is transport-agnostic: both the FastAPI
listener and the request/response handler delegate to it.
"""
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone

from pydantic import ValidationError

from recyclopedia.adapters.camera.frames import parse_data_url
from recyclopedia.adapters.vision.base import InlineImage
from recyclopedia.orchestrator import errors
from recyclopedia.services.models import ClassifyRequest, ErrorOut
from recyclopedia.services.parsing import (
    FallbackExtracted, normalize, parse_reply, precheck_passed,
)

PRECHECK_PROMPT = """You are a trash classification assistant. Analyze this image and determine if it shows a SINGLE, CLEAR item that needs disposal.

Respond with ONLY "VALID" or "INVALID".

VALID if:
- Shows ONE clear item that needs disposal (trash, recyclable, compostable, etc.)
- Item is clearly visible and identifiable
- Focus is on the item itself

INVALID if:
- Multiple different items visible
- No clear item (just background, blurry, dark)
- Person's hand/body is the main subject
- Image is too unclear to identify anything
- Shows a scene/room rather than a specific item"""

CLASSIFICATION_PROMPT = """You are a waste management expert. Analyze this image and classify the item for proper disposal.

Provide your response as a JSON object with this exact structure:
{
  "itemName": "what is this item (be specific but concise)",
  "bin": "RECYCLING or LANDFILL or COMPOST or SPECIAL or UNKNOWN",
  "reason": "brief explanation (1-2 sentences)",
  "alternatives": ["alternative 1", "alternative 2", "alternative 3"]
}

Bin categories:
- RECYCLING: Clean paper, cardboard, plastic bottles (#1-2), aluminum/steel cans, glass bottles
- LANDFILL: Non-recyclable plastic, contaminated items, certain packaging
- COMPOST: Food scraps, yard waste, compostable materials
- SPECIAL: Electronics, batteries, hazardous waste, items needing special handling
- UNKNOWN: Cannot identify the item clearly

For alternatives, provide 2-4 creative but practical reuse, upcycling, or proper disposal options specific to this item.

IMPORTANT: Return ONLY the JSON object, no markdown formatting or code blocks."""

CLASSIFICATION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "itemName": {"type": "STRING", "description": "Name of the item, e.g. 'Plastic Water Bottle'."},
        "bin": {
            "type": "STRING",
            "enum": ["RECYCLING", "LANDFILL", "COMPOST", "SPECIAL", "UNKNOWN"],
            "description": "The bin the item should be placed in.",
        },
        "reason": {"type": "STRING", "description": "One or two sentences explaining the choice."},
        "alternatives": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "2-4 short reuse, upcycling or disposal suggestions.",
        },
    },
    "required": ["itemName", "bin", "reason", "alternatives"],
}

MSG_METHOD = "Method not allowed"
MSG_IMAGE_REQUIRED = "Image data is required"
MSG_CONFIG = "Server configuration error: API key not set"
MSG_BAD_FORMAT = "Invalid image data format"
MSG_PRECHECK_UPSTREAM = "Failed to connect to the AI model. Please try again."
MSG_NO_ITEM = "Please take a clear photo of a single item you want to dispose of."
MSG_CLASSIFY_UPSTREAM = "Failed to classify item"
MSG_INTERNAL = "Failed to classify item. Please try again."


@dataclass
class ServiceResponse:
    status_code: int
    body: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code == 200


class ClassificationService:
    def __init__(self, gateway, status_store, expose_debug: bool = False):
        self.gateway = gateway
        self.status = status_store
        self.expose_debug = expose_debug

    def _error(self, status_code: int, code: str, message: str, debug: dict | None = None) -> ServiceResponse:
        self.status.log(f"classify: {status_code} {code} {message!r} debug={debug}")
        out = ErrorOut(error=message, code=code, debug=debug if self.expose_debug else None)
        return ServiceResponse(status_code, out.model_dump(exclude_none=True))

    def handle(self, method: str, body) -> ServiceResponse:
        t0 = time.time()
        try:
            resp = self._handle(method, body, t0)
        except Exception as e:
            resp = self._error(500, errors.ERR_INTERNAL, MSG_INTERNAL, {
                "message": str(e),
                "type": type(e).__name__,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "duration_ms": int((time.time() - t0) * 1000),
            })
        self.status.count(resp.ok)
        return resp

    def _handle(self, method: str, body, t0: float) -> ServiceResponse:
        method = (method or "").upper()
        if method != "POST":
            return self._error(405, errors.ERR_METHOD_NOT_ALLOWED, MSG_METHOD,
                               {"method": method, "expected": "POST"})

        try:
            req = ClassifyRequest.model_validate(body if isinstance(body, dict) else {})
        except ValidationError:
            req = ClassifyRequest()
        if not req.imageData:
            keys = sorted(body.keys()) if isinstance(body, dict) else []
            return self._error(400, errors.ERR_INVALID_REQUEST, MSG_IMAGE_REQUIRED, {"bodyKeys": keys})

        if not self.gateway.ready:
            return self._error(500, errors.ERR_CONFIG, MSG_CONFIG, {"adapter": self.gateway.name})

        parts = parse_data_url(req.imageData)
        if parts is None:
            return self._error(400, errors.ERR_INVALID_REQUEST, MSG_BAD_FORMAT,
                               {"format": req.imageData[:30]})
        mime_type, data_b64 = parts
        image = InlineImage(mime_type=mime_type, data_b64=data_b64)
        self.status.log(f"classify: image {mime_type} ~{round(len(data_b64) * 0.75 / 1024)}KB "
                        f"via {self.gateway.name}")

        try:
            precheck = self.gateway.generate(PRECHECK_PROMPT, image).strip()
        except Exception as e:
            return self._error(500, errors.ERR_UPSTREAM, MSG_PRECHECK_UPSTREAM,
                               {"step": "pre-check", "message": str(e), "type": type(e).__name__})
        self.status.log(f"classify: pre-check reply={precheck!r}")
        if not precheck_passed(precheck):
            return self._error(400, errors.ERR_NO_ITEM_DETECTED, MSG_NO_ITEM,
                               {"preCheckResponse": precheck})

        try:
            raw = self.gateway.generate(CLASSIFICATION_PROMPT, image, schema=CLASSIFICATION_SCHEMA)
        except Exception as e:
            return self._error(500, errors.ERR_UPSTREAM, MSG_CLASSIFY_UPSTREAM,
                               {"step": "classification", "message": str(e), "type": type(e).__name__})
        self.status.log(f"classify: raw reply {raw[:200]!r}")

        parsed = parse_reply(raw)
        if isinstance(parsed, FallbackExtracted):
            self.status.log(f"classify: reply was not JSON, extracted fields {sorted(parsed.data)}")
        result = normalize(parsed)

        dt = int((time.time() - t0) * 1000)
        self.status.log(f"classify: {result.item_name} -> {result.bin.value} dt={dt}ms")
        return ServiceResponse(200, result.to_wire())
