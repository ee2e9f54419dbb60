"""Tests for reverse geocoding and address enrichment."""
import logging
import pytest
from unittest.mock import patch, AsyncMock, MagicMock

import httpx

from fakes import FakeGeocoder
from running_courses.core.courses import build_course_set, build_courses
from running_courses.errors import UpstreamServiceError
from running_courses.models import Coordinate, CourseSet, coordinate_key

SEOUL = Coordinate(lat=37.5665, lon=126.9780)


def _mock_client(mock_client_cls, payload=None, side_effect=None):
    response = MagicMock()
    response.raise_for_status = MagicMock()
    response.json = MagicMock(return_value=payload)
    mock_client = AsyncMock()
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client.get = AsyncMock(return_value=response, side_effect=side_effect)
    mock_client_cls.return_value = mock_client
    return mock_client


def test_unique_endpoints_start_plus_twelve_ends():
    from running_courses.core.geocoding import unique_endpoints

    coords = unique_endpoints(build_course_set(SEOUL, 5000))
    assert len(coords) == 13
    assert coords[0] == SEOUL


def test_unique_endpoints_deduplicates_identical_coordinates():
    """When every end collapses onto the start only one lookup is needed."""
    from running_courses.core.geocoding import unique_endpoints

    courses = [
        c.model_copy(update={"end": SEOUL}) for c in build_courses(SEOUL, 5000)
    ]
    course_set = CourseSet(base=SEOUL, radius_km=5, radius_m=5000, courses=courses)
    assert unique_endpoints(course_set) == [SEOUL]


@pytest.mark.anyio
async def test_resolve_addresses_calls_once_per_unique_coordinate(no_sleep):
    from running_courses.core.geocoding import resolve_addresses

    geocoder = FakeGeocoder()
    address_map = await resolve_addresses(build_course_set(SEOUL, 5000), geocoder, delay_s=0.1)
    assert len(geocoder.calls) == 13
    assert address_map[coordinate_key(SEOUL.lat, SEOUL.lon)] == "Addr 1"


@pytest.mark.anyio
async def test_lookup_addresses_sleeps_between_calls_only(no_sleep):
    from running_courses.core.geocoding import lookup_addresses

    coords = [Coordinate(lat=i, lon=i) for i in range(4)]
    await lookup_addresses(coords, FakeGeocoder(), delay_s=0.1)
    assert no_sleep == [0.1, 0.1, 0.1]


@pytest.mark.anyio
async def test_lookup_failure_is_per_item_and_logged(no_sleep, caplog):
    from running_courses.core.geocoding import lookup_addresses

    coords = [Coordinate(lat=i, lon=i) for i in range(3)]
    with caplog.at_level(logging.WARNING, logger="running_courses.core.geocoding"):
        results = await lookup_addresses(coords, FakeGeocoder(fail_on={2}), delay_s=0)

    assert [r.address.address_name if r.address else None for r in results] == ["Addr 1", None, "Addr 3"]
    assert any(
        r.name == "running_courses.core.geocoding" and r.levelno == logging.WARNING
        for r in caplog.records
    )


@pytest.mark.anyio
async def test_merge_addresses_leaves_unresolved_ends_empty(no_sleep):
    from running_courses.core.geocoding import merge_addresses, resolve_addresses

    course_set = build_course_set(SEOUL, 5000)
    # Lookup #2 is course 1's end
    address_map = await resolve_addresses(course_set, FakeGeocoder(fail_on={2}))
    enriched = merge_addresses(course_set, address_map)

    assert len(enriched) == 12
    assert all(c.start.address_name == "Addr 1" for c in enriched)
    assert enriched[0].end.address_name is None
    assert enriched[1].end.address_name == "Addr 3"
    assert enriched[4].midpoints == course_set.courses[4].midpoints


@pytest.mark.anyio
async def test_kakao_client_parses_first_document():
    from running_courses.core.geocoding import KakaoGeocodingClient, KAKAO_COORD2ADDRESS_URL

    payload = {
        "meta": {"total_count": 1},
        "documents": [{
            "address": {
                "address_name": "서울 중구 태평로1가 31",
                "region_1depth_name": "서울",
                "region_2depth_name": "중구",
                "region_3depth_name": "태평로1가",
                "mountain_yn": "N",
            },
            "road_address": {
                "address_name": "서울특별시 중구 세종대로 110",
                "road_name": "세종대로",
                "building_name": "서울특별시청",
            },
        }],
    }
    with patch("httpx.AsyncClient") as mock_client_cls:
        client = _mock_client(mock_client_cls, payload=payload)
        address = await KakaoGeocodingClient(api_key="kk").get_address(37.5665, 126.978)

    assert address.address_name == "서울 중구 태평로1가 31"
    assert address.road_address.road_name == "세종대로"
    _, kwargs = client.get.call_args
    assert kwargs["params"] == {"x": 126.978, "y": 37.5665}
    assert mock_client_cls.call_args.kwargs["headers"] == {"Authorization": "KakaoAK kk"}


@pytest.mark.anyio
async def test_kakao_client_no_documents_returns_none():
    from running_courses.core.geocoding import KakaoGeocodingClient

    with patch("httpx.AsyncClient") as mock_client_cls:
        _mock_client(mock_client_cls, payload={"meta": {"total_count": 0}, "documents": []})
        assert await KakaoGeocodingClient(api_key="kk").get_address(0.0, 0.0) is None


@pytest.mark.anyio
async def test_kakao_client_http_error_raises_upstream_error():
    from running_courses.core.geocoding import KakaoGeocodingClient

    with patch("httpx.AsyncClient") as mock_client_cls:
        _mock_client(mock_client_cls, side_effect=httpx.ReadTimeout("slow"))
        with pytest.raises(UpstreamServiceError, match="geocoding"):
            await KakaoGeocodingClient(api_key="kk").get_address(0.0, 0.0)


@pytest.mark.anyio
async def test_kakao_client_without_key_raises():
    from running_courses.core.geocoding import KakaoGeocodingClient

    client = KakaoGeocodingClient(api_key="")
    assert client.is_configured is False
    with pytest.raises(UpstreamServiceError, match="KAKAO_REST_API_KEY"):
        await client.get_address(0.0, 0.0)


def test_unique_endpoints_treats_negative_zero_as_zero():
    from running_courses.core.geocoding import unique_endpoints

    origin = Coordinate(lat=0.0, lon=0.0)
    courses = [
        c.model_copy(update={"start": origin, "end": Coordinate(lat=0.0, lon=-0.0)})
        for c in build_courses(origin, 5000)
    ]
    course_set = CourseSet(base=origin, radius_km=5, radius_m=5000, courses=courses)
    assert len(unique_endpoints(course_set)) == 1
