from pydantic import BaseModel, ConfigDict
from typing import Any, Optional


class ClassifyRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    imageData: Optional[str] = None  # "data:<mime>;base64,<data>"


class ClassificationOut(BaseModel):
    itemName: str
    bin: str           # RECYCLING | LANDFILL | COMPOST | SPECIAL | UNKNOWN
    reason: str
    alternatives: list[str]


class ErrorOut(BaseModel):
    error: str                       # safe to show to the end user
    code: str                        # see orchestrator.errors ERR_*
    debug: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    api: bool
    vision_adapter: str
    vision_ready: bool
    all_ok: bool


class StatusResponse(BaseModel):
    requests: int
    failures: int
    logs: list[str]
