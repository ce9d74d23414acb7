from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Optional, List

PhaseName = Literal["idle", "requesting", "scanning", "processing", "result", "error"]

IDLE = "idle"
REQUESTING = "requesting"
SCANNING = "scanning"
PROCESSING = "processing"
RESULT = "result"
ERROR = "error"


class BinType(str, Enum):
    RECYCLING = "RECYCLING"
    LANDFILL = "LANDFILL"
    COMPOST = "COMPOST"
    SPECIAL = "SPECIAL"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: Any) -> "BinType":
        """Case-insensitive lookup; anything unrecognized is UNKNOWN."""
        if isinstance(raw, str):
            try:
                return cls(raw.strip().upper())
            except ValueError:
                pass
        return cls.UNKNOWN

    @property
    def label(self) -> str:
        return BIN_DETAILS[self][0]

    @property
    def hint(self) -> str:
        return BIN_DETAILS[self][1]


# (display label, one-line guidance) shown on the result screen
BIN_DETAILS: dict[BinType, tuple[str, str]] = {
    BinType.RECYCLING: ("Recycling", "Rinse it and put it in the RECYCLING bin."),
    BinType.LANDFILL:  ("Landfill",  "Put it in the LANDFILL bin."),
    BinType.COMPOST:   ("Compost",   "Put it in the COMPOST bin."),
    BinType.SPECIAL:   ("Special",   "Take it to a special-handling drop-off."),
    BinType.UNKNOWN:   ("Unknown",   "Check your local disposal guidelines."),
}


@dataclass
class ClassificationResult:
    item_name: str
    bin: BinType
    reason: str
    alternatives: List[str] = field(default_factory=list)

    def to_wire(self) -> dict:
        return {
            "itemName": self.item_name,
            "bin": self.bin.value,
            "reason": self.reason,
            "alternatives": list(self.alternatives),
        }

    @classmethod
    def from_wire(cls, data: dict) -> "ClassificationResult":
        alternatives = data.get("alternatives")
        if not isinstance(alternatives, list):
            alternatives = []
        return cls(
            item_name=str(data["itemName"]),
            bin=BinType.parse(data["bin"]),
            reason=str(data["reason"]),
            alternatives=[str(a) for a in alternatives],
        )


@dataclass
class SessionState:
    phase: PhaseName = IDLE
    active_stream: Optional[Any] = None     # CameraStream while scanning
    flash_supported: bool = False
    flash_engaged: bool = False
    flash_error: Optional[str] = None       # last failed torch toggle, never a phase change
    last_result: Optional[ClassificationResult] = None
    last_error: Optional[str] = None
    last_snapshot: Optional[str] = None     # data URL submitted for classification
