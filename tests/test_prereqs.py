"""Tests for tool prerequisite helpers."""
import pytest

from running_courses.config import Settings


def _state(google="", kakao="", gemini=""):
    from running_courses.state import ServiceState

    return ServiceState.from_settings(Settings(
        _env_file=None,
        GOOGLE_MAPS_API_KEY=google,
        KAKAO_REST_API_KEY=kakao,
        GEMINI_API_KEY=gemini,
    ))


def test_require_services_raises_without_google_key():
    from running_courses.tools._prereqs import require_services

    with pytest.raises(ValueError, match="GOOGLE_MAPS_API_KEY"):
        require_services(_state(kakao="k", gemini="g"), elevation=True)


def test_require_services_raises_without_kakao_key():
    from running_courses.tools._prereqs import require_services

    with pytest.raises(ValueError, match="KAKAO_REST_API_KEY"):
        require_services(_state(google="g", gemini="g"), elevation=True, geocoding=True)


def test_require_services_raises_without_gemini_key():
    from running_courses.tools._prereqs import require_services

    with pytest.raises(ValueError, match="GEMINI_API_KEY"):
        require_services(_state(google="g", kakao="k"), model=True)


def test_require_services_passes_when_configured():
    from running_courses.tools._prereqs import require_services

    # Should not raise
    require_services(
        _state(google="g", kakao="k", gemini="m"),
        elevation=True, geocoding=True, model=True, geolocation=True,
    )


def test_require_services_nothing_requested_always_passes():
    from running_courses.tools._prereqs import require_services

    require_services(_state())
