"""
Unit tests for the Gemini address normalizer.
Focuses on graceful degradation: every operation must fall back to its
pass-through default instead of raising.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

from conftest import gemini_response
from engine.ai import AddressNormalizer, parse_address_type, parse_model_json
from shared.models import AddressType


def _model(*outputs):
    """Fake Gemini model; str outputs become responses, exceptions are raised."""
    model = MagicMock()
    model.generate_content_async = AsyncMock(side_effect=[
        gemini_response(o) if isinstance(o, str) else o for o in outputs
    ])
    return model


def _normalizer(*outputs):
    model = _model(*outputs)
    return AddressNormalizer("test-key", model=model), model


# -----------------------------------------------------------------------------
# Missing credential: no network call, pass-through values
# -----------------------------------------------------------------------------
def test_missing_key_passes_through_without_calls():
    model = _model()
    normalizer = AddressNormalizer("", model=model)

    assert asyncio.run(normalizer.normalize("  강남역 ")) == "강남역"

    priority = asyncio.run(normalizer.priority_list("강남역"))
    assert priority.items == ["강남역"]
    assert priority.primary == "강남역"
    assert priority.primary_type is None

    analyzed = asyncio.run(normalizer.classify_and_normalize("강남역"))
    assert analyzed.normalized == "강남역"
    assert analyzed.type is None

    assert asyncio.run(normalizer.candidates("강남역")) == []
    model.generate_content_async.assert_not_called()


def test_empty_input_priority_list_is_empty():
    normalizer, model = _normalizer()
    priority = asyncio.run(normalizer.priority_list("   "))
    assert priority.items == []
    assert priority.primary == ""
    model.generate_content_async.assert_not_called()


# -----------------------------------------------------------------------------
# normalize
# -----------------------------------------------------------------------------
def test_normalize_strips_code_fence_and_quotes():
    normalizer, _ = _normalizer('```\n"서울특별시 중구 세종대로 110"\n```')
    assert asyncio.run(normalizer.normalize("서울 시청")) == "서울특별시 중구 세종대로 110"


def test_normalize_falls_back_on_error_or_empty_answer():
    normalizer, _ = _normalizer(TimeoutError("deadline exceeded"), "")
    assert asyncio.run(normalizer.normalize("서울 시청")) == "서울 시청"
    assert asyncio.run(normalizer.normalize("서울 시청")) == "서울 시청"


# -----------------------------------------------------------------------------
# classify_and_normalize
# -----------------------------------------------------------------------------
def test_classify_parses_type_and_normalized():
    normalizer, model = _normalizer('{"type":"도로명","normalized":"서울 중구 세종대로 110"}')
    result = asyncio.run(normalizer.classify_and_normalize("시청 세종대로 110 3층"))

    assert result.normalized == "서울 중구 세종대로 110"
    assert result.type == AddressType.ROAD
    kwargs = model.generate_content_async.await_args.kwargs
    assert kwargs["generation_config"] == {"response_mime_type": "application/json"}
    assert kwargs["request_options"] == {"timeout": 8.0}


def test_classify_non_json_returns_raw():
    normalizer, _ = _normalizer("도로명 주소입니다")
    result = asyncio.run(normalizer.classify_and_normalize("서울역"))
    assert result.normalized == "서울역"
    assert result.type is None


# -----------------------------------------------------------------------------
# priority_list
# -----------------------------------------------------------------------------
def test_priority_list_merges_service_and_local_candidates():
    raw = "서울특별시 강남구 테헤란로 123 래미안타워 101동 202호"
    normalizer, _ = _normalizer(
        '{"road":"서울특별시 강남구 테헤란로 123 101동","jibun":"서울특별시 강남구 역삼동 736-1"}'
    )
    priority = asyncio.run(normalizer.priority_list(raw))

    assert priority.items == ["서울특별시 강남구 테헤란로 123", "서울특별시 강남구 역삼동 736-1"]
    assert priority.primary == "서울특별시 강남구 테헤란로 123"
    assert priority.primary_type == AddressType.ROAD


def test_priority_list_parse_failure_uses_classifier():
    raw = "서울특별시 강남구 역삼동 736-1 역삼 아파트 3층"
    normalizer, model = _normalizer(
        "road: 없음",
        '{"type":"지번","normalized":"서울특별시 강남구 역삼동 736-1"}',
    )
    priority = asyncio.run(normalizer.priority_list(raw))

    assert model.generate_content_async.await_count == 2
    assert "서울특별시 강남구 역삼동 736-1" in priority.items
    assert priority.items[0] == "서울특별시 강남구 역삼동 736-1 역삼"


def test_priority_list_service_failure_returns_raw():
    normalizer, _ = _normalizer(ConnectionError("unreachable"))
    priority = asyncio.run(normalizer.priority_list("강남역 11번 출구"))
    assert priority.items == ["강남역 11번 출구"]
    assert priority.primary == "강남역 11번 출구"
    assert priority.primary_type is None


# -----------------------------------------------------------------------------
# candidates
# -----------------------------------------------------------------------------
def test_candidates_trims_and_caps_at_five():
    normalizer, _ = _normalizer('["서울역", " ", "서울특별시 중구 한강대로 405", null, "a", "b", "c", "d"]')
    assert asyncio.run(normalizer.candidates("서울역 KTX")) == [
        "서울역", "서울특별시 중구 한강대로 405", "a", "b", "c",
    ]


def test_candidates_non_array_is_empty():
    normalizer, _ = _normalizer('{"candidates": ["서울역"]}')
    assert asyncio.run(normalizer.candidates("서울역")) == []


# -----------------------------------------------------------------------------
# Strict parser
# -----------------------------------------------------------------------------
def test_parse_model_json_distinguishes_unparsed_from_empty():
    assert parse_model_json('```json\n{"road": ""}\n```', dict) == (True, {"road": ""})
    assert parse_model_json("[]", list) == (True, [])
    assert parse_model_json("{}", list) == (False, None)
    assert parse_model_json("not json", dict) == (False, None)
    assert parse_model_json("", dict) == (False, None)


def test_parse_address_type_labels():
    assert parse_address_type("구주소") == AddressType.LEGACY
    assert parse_address_type("POI") == AddressType.POI
    assert parse_address_type("지번주소") == AddressType.LOT
    assert parse_address_type("unknown") is None
    assert parse_address_type(None) is None
