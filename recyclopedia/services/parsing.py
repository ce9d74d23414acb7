"""
Normalization of free-form model replies.

Stage 1 replies are matched against the VALID token. Stage 2 replies are
parsed as JSON first (`Structured`); if that fails the fields are recovered
with patterns (`FallbackExtracted`). Either way `normalize` fills defaults so
a reply that ignores the requested schema degrades instead of failing.
"""
import json
import re
from dataclasses import dataclass
from typing import Union

from recyclopedia.orchestrator.contracts import BinType, ClassificationResult

DEFAULT_ITEM_NAME = "Unknown Item"
DEFAULT_REASON = "Could not determine disposal method."
DEFAULT_ALTERNATIVE = "Check with local recycling center for proper disposal"

VALID_TOKEN = "VALID"

_FENCE_RE = re.compile(r"^\s*```[\w-]*\s*|\s*```\s*$")
_BIN_TOKENS = "|".join(b.value for b in BinType)

_ITEM_NAME_RE = re.compile(
    r"""["']?itemName["']?\s*[:=]\s*(?:"([^"\n]+)"|'([^'\n]+)'|([^,"'\n}]+))""", re.IGNORECASE
)
_BIN_RE = re.compile(rf"""["']?bin["']?\s*[:=]\s*["']?({_BIN_TOKENS})\b""", re.IGNORECASE)
_REASON_RE = re.compile(
    r"""["']?reason["']?\s*[:=]\s*(?:"([^"\n]+)"|'([^'\n]+)'|([^"\n}]+))""", re.IGNORECASE
)
_ALTERNATIVES_RE = re.compile(r"""["']?alternatives["']?\s*[:=]\s*\[([^\]]*)\]""", re.IGNORECASE | re.DOTALL)
_QUOTED_RE = re.compile(r'"([^"\n]+)"')


@dataclass
class Structured:
    data: dict


@dataclass
class FallbackExtracted:
    data: dict


ParsedReply = Union[Structured, FallbackExtracted]


def precheck_passed(reply: str) -> bool:
    """Exact match: the trimmed reply, minus wrapping quotes/markup and a trailing
    period, must equal VALID (case-insensitive). "INVALID" never passes."""
    token = (reply or "").strip().strip("\"'`*").strip().rstrip(".").strip()
    return token.upper() == VALID_TOKEN


def strip_code_fences(text: str) -> str:
    """Drop a leading ```lang and a trailing ``` even when they share a line with the payload."""
    return _FENCE_RE.sub("", text or "").strip()


def _first_group(m: re.Match | None) -> str | None:
    if m is None:
        return None
    for g in m.groups():
        if g and g.strip():
            return g.strip()
    return None


def extract_fields(text: str) -> dict:
    data: dict = {}
    item_name = _first_group(_ITEM_NAME_RE.search(text))
    if item_name:
        data["itemName"] = item_name
    bin_m = _BIN_RE.search(text)
    if bin_m:
        data["bin"] = bin_m.group(1).upper()
    reason = _first_group(_REASON_RE.search(text))
    if reason:
        data["reason"] = reason
    alt_m = _ALTERNATIVES_RE.search(text)
    if alt_m:
        data["alternatives"] = _QUOTED_RE.findall(alt_m.group(1))
    return data


def parse_reply(text: str) -> ParsedReply:
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except ValueError:
        data = None
    if isinstance(data, dict):
        return Structured(data)
    return FallbackExtracted(extract_fields(cleaned))


def _text(value, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def normalize_alternatives(value) -> list[str]:
    if isinstance(value, list):
        alts = [a.strip() for a in value if isinstance(a, str) and a.strip()]
        if alts:
            return alts
    return [DEFAULT_ALTERNATIVE]


def normalize(parsed: ParsedReply) -> ClassificationResult:
    data = parsed.data
    return ClassificationResult(
        item_name=_text(data.get("itemName"), DEFAULT_ITEM_NAME),
        bin=BinType.parse(data.get("bin")),
        reason=_text(data.get("reason"), DEFAULT_REASON),
        alternatives=normalize_alternatives(data.get("alternatives")),
    )
