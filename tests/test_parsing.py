from __future__ import annotations

import json

import pytest

from recyclopedia.orchestrator.contracts import BinType
from recyclopedia.services.parsing import (
    DEFAULT_ALTERNATIVE,
    DEFAULT_ITEM_NAME,
    DEFAULT_REASON,
    FallbackExtracted,
    Structured,
    normalize,
    parse_reply,
    precheck_passed,
    strip_code_fences,
)


@pytest.mark.parametrize("reply", ["VALID", "  VALID\n", "valid", '"VALID"', "VALID.", "**VALID**"])
def test_precheck_accepts_valid_token(reply):
    assert precheck_passed(reply)


@pytest.mark.parametrize("reply", ["INVALID", "invalid", "", "VALID image of a bottle", "NOT VALID", "yes"])
def test_precheck_rejects_everything_else(reply):
    assert not precheck_passed(reply)


def test_strip_code_fences():
    raw = '```json\n{"itemName": "Can"}\n```'
    assert strip_code_fences(raw) == '{"itemName": "Can"}'


JUICE_BOX = {
    "itemName": "Kid's Juice Box",
    "bin": "LANDFILL",
    "reason": "Multi-layer cartons are not accepted in most curbside programs.",
    "alternatives": ["Use it for a craft project"],
}


@pytest.mark.parametrize(
    "raw",
    [
        "```json\n" + json.dumps(JUICE_BOX) + "```",
        "```json " + json.dumps(JUICE_BOX) + " ```",
        "```" + json.dumps(JUICE_BOX) + "\n```\n",
    ],
)
def test_inline_fences_still_parse_as_json(raw):
    parsed = parse_reply(raw)
    assert isinstance(parsed, Structured)
    assert normalize(parsed).to_wire() == JUICE_BOX


def test_fallback_keeps_apostrophe_in_item_name():
    raw = '{"itemName": "Kid\'s Juice Box", "bin": "LANDFILL", "reason": "Mixed materials."'
    parsed = parse_reply(raw)
    assert isinstance(parsed, FallbackExtracted)
    assert normalize(parsed).item_name == "Kid's Juice Box"


def test_structured_reply_is_kept_verbatim():
    payload = {
        "itemName": "Plastic Water Bottle",
        "bin": "RECYCLING",
        "reason": "PET bottles are recyclable.",
        "alternatives": ["Reuse as a planter", "Refill it"],
    }
    parsed = parse_reply(json.dumps(payload))
    assert isinstance(parsed, Structured)
    assert normalize(parsed).to_wire() == payload


def test_fenced_json_is_structured():
    parsed = parse_reply('```json\n{"itemName": "Apple Core", "bin": "compost", "reason": "Food scrap."}\n```')
    assert isinstance(parsed, Structured)
    result = normalize(parsed)
    assert result.bin is BinType.COMPOST
    assert result.alternatives == [DEFAULT_ALTERNATIVE]


def test_fallback_extracts_fields_from_prose():
    raw = (
        "Sure! Here is what I found:\n"
        "itemName: 'Used AA Battery'\n"
        "bin: special\n"
        'reason: "Batteries contain heavy metals and need a drop-off point."\n'
    )
    parsed = parse_reply(raw)
    assert isinstance(parsed, FallbackExtracted)
    result = normalize(parsed)
    assert result.item_name == "Used AA Battery"
    assert result.bin is BinType.SPECIAL
    assert result.reason == "Batteries contain heavy metals and need a drop-off point."
    assert result.alternatives == [DEFAULT_ALTERNATIVE]


def test_fallback_on_truncated_json_recovers_alternatives():
    raw = '{"itemName": "Glass Jar", "bin": "RECYCLING", "reason": "Glass is recyclable.", "alternatives": ["Store spices", "Make a candle"]'
    parsed = parse_reply(raw)
    assert isinstance(parsed, FallbackExtracted)
    result = normalize(parsed)
    assert result.item_name == "Glass Jar"
    assert result.alternatives == ["Store spices", "Make a candle"]


def test_fallback_uses_defaults_when_nothing_matches():
    result = normalize(parse_reply("I cannot tell what this is."))
    assert result.item_name == DEFAULT_ITEM_NAME
    assert result.bin is BinType.UNKNOWN
    assert result.reason == DEFAULT_REASON
    assert result.alternatives == [DEFAULT_ALTERNATIVE]


@pytest.mark.parametrize("alternatives", [None, "reuse it", [], ["", "  "], {"a": 1}])
def test_bad_alternatives_become_single_fallback(alternatives):
    data = {"itemName": "Can", "bin": "RECYCLING", "reason": "Metal."}
    if alternatives is not None:
        data["alternatives"] = alternatives
    assert normalize(Structured(data)).alternatives == [DEFAULT_ALTERNATIVE]


def test_unrecognized_bin_is_unknown():
    assert normalize(Structured({"itemName": "X", "bin": "TRASH", "reason": "r"})).bin is BinType.UNKNOWN


def test_json_array_reply_falls_back():
    assert isinstance(parse_reply('["VALID"]'), FallbackExtracted)
