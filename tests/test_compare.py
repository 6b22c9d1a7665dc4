"""
End-to-end tests for the comparison pipeline with stubbed providers.
The normalizer runs without a Gemini key, so every normalization step is a
pass-through and no network call is made.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from engine.ai import AddressNormalizer
from engine.compare import Comparator, build_normalizer
from shared.config import Settings
from shared.errors import DestinationGeocodingError, RouteFailure
from shared.models import Coordinate, RouteSummary

SEOUL_STATION = Coordinate(lon=126.9707, lat=37.5547)
GANGNAM = Coordinate(lon=127.02764, lat=37.49794)
JAMSIL = Coordinate(lon=127.1002, lat=37.5133)

KNOWN = {"서울역": SEOUL_STATION, "강남역": GANGNAM, "잠실역": JAMSIL}


def _kakao(known=KNOWN, route=None):
    client = MagicMock()
    client.geocode = AsyncMock(side_effect=lambda q: known.get(q))
    client.route_summary = AsyncMock(return_value=route or RouteSummary(distance=12000, duration=900))
    return client


def _tmap(known=KNOWN, route=None):
    client = MagicMock()
    client.geocode = AsyncMock(side_effect=lambda q: known.get(q))
    client.shortest_route = AsyncMock(return_value=route or RouteSummary(distance=11000, duration=1000))
    return client


def _compare(kakao, tmap, destination, rows):
    comparator = Comparator(AddressNormalizer(""), kakao, tmap)
    return asyncio.run(comparator.compare(destination, rows))


# -----------------------------------------------------------------------------
# Scenario 1: Happy Path (both providers geocode and route)
# -----------------------------------------------------------------------------
def test_compare_both_providers_succeed():
    kakao, tmap = _kakao(), _tmap()
    results = _compare(kakao, tmap, "서울역", [{"address": "강남역"}])

    assert len(results) == 1
    row = results[0]
    assert row["address"] == "강남역"
    assert (row["kakao"], row["kakaoTime"]) == (12000, 900)
    assert (row["tmap"], row["tmapTime"]) == (11000, 1000)
    assert row["kakaoUsed"] == "강남역"
    assert row["tmapUsed"] == "강남역"
    assert row["normalizedDestination"] == "서울역"
    assert row["kakaoError"] is None and row["tmapError"] is None and row["error"] is None

    # T맵 경로는 카카오 좌표를 보조 시도로 받는다
    origin, destination, alt_origin, alt_destination = tmap.shortest_route.await_args.args
    assert (origin.lon, destination.lon) == (GANGNAM.lon, SEOUL_STATION.lon)
    assert (alt_origin.lon, alt_destination.lon) == (GANGNAM.lon, SEOUL_STATION.lon)


# -----------------------------------------------------------------------------
# Scenario 2: Missing Kakao credential degrades only the Kakao columns
# -----------------------------------------------------------------------------
def test_missing_kakao_credential_keeps_tmap_results():
    tmap = _tmap()
    results = _compare(None, tmap, "서울역", [{"address": "강남역"}, {"address": "잠실역"}])

    for row in results:
        assert row["kakaoError"] == "카카오 키 미설정"
        assert row["error"] == "카카오 키 미설정"
        assert row["kakao"] is None
        assert row["tmap"] == 11000
        assert row["tmapError"] is None
    assert tmap.shortest_route.await_args.args[2:] == (None, None)


# -----------------------------------------------------------------------------
# Scenario 3: Empty row is reported without affecting siblings
# -----------------------------------------------------------------------------
def test_empty_row_reports_error_only_for_itself():
    results = _compare(_kakao(), _tmap(), "서울역", [{"address": "  "}, {"address": "강남역"}, "garbage"])

    assert results[0]["error"] == "빈 주소"
    assert results[0]["kakao"] is None and results[0]["tmap"] is None
    assert results[1]["kakao"] == 12000 and results[1]["error"] is None
    assert results[2]["error"] == "빈 주소"


def test_rows_keep_input_order():
    results = _compare(_kakao(), _tmap(), "서울역", [{"address": "잠실역"}, {"address": "강남역"}])
    assert [r["address"] for r in results] == ["잠실역", "강남역"]


# -----------------------------------------------------------------------------
# Scenario 4: Destination unresolved by both providers
# -----------------------------------------------------------------------------
def test_destination_failure_raises_with_provider_detail():
    with pytest.raises(DestinationGeocodingError) as exc_info:
        _compare(_kakao(known={}), None, "없는 도착지", [{"address": "강남역"}])
    assert exc_info.value.detail == {"kakao": "fail", "tmap": "TMAP_APP_KEY 미설정"}


# -----------------------------------------------------------------------------
# Scenario 5: Per-provider geocoding and routing failures stay contained
# -----------------------------------------------------------------------------
def test_origin_geocoding_failure_for_one_provider():
    kakao = _kakao(known={"서울역": SEOUL_STATION})
    results = _compare(kakao, _tmap(), "서울역", [{"address": "강남역"}])

    row = results[0]
    assert row["kakaoError"] == "카카오 지오코딩 실패"
    assert row["tmap"] == 11000
    kakao.route_summary.assert_not_awaited()


def test_route_failure_is_reported_per_provider():
    kakao = _kakao()
    kakao.route_summary = AsyncMock(side_effect=RouteFailure("길찾기 권한 없음"))
    results = _compare(kakao, _tmap(), "서울역", [{"address": "강남역"}])

    row = results[0]
    assert row["kakaoError"] == "길찾기 권한 없음"
    assert row["error"] == "길찾기 권한 없음"
    assert row["tmap"] == 11000


def test_empty_route_is_reported_as_no_route():
    results = _compare(_kakao(route=RouteSummary()), _tmap(), "서울역", [{"address": "강남역"}])
    assert results[0]["kakaoError"] == "카카오 경로 없음"
    assert results[0]["kakao"] is None


# -----------------------------------------------------------------------------
# Scenario 6: Gemini client is configured once, outside request handling
# -----------------------------------------------------------------------------
@patch("engine.ai.genai")
def test_normalizer_is_configured_once_and_shared(mock_genai):
    model = mock_genai.GenerativeModel.return_value
    model.generate_content_async = AsyncMock(side_effect=RuntimeError("quota"))

    normalizer = build_normalizer(Settings(GEMINI_API_KEY="test-key"))
    mock_genai.configure.assert_called_once_with(api_key="test-key")

    comparator = Comparator(normalizer, _kakao(), _tmap())
    for _ in range(2):
        results = asyncio.run(comparator.compare("서울역", [{"address": "강남역"}]))
        assert results[0]["kakao"] == 12000

    mock_genai.configure.assert_called_once()
    mock_genai.GenerativeModel.assert_called_once()
    assert model.generate_content_async.await_count > 0


@patch("engine.ai.genai")
def test_normalizer_without_key_skips_configuration(mock_genai):
    normalizer = build_normalizer(Settings(GEMINI_API_KEY=""))
    assert not normalizer.enabled
    mock_genai.configure.assert_not_called()
