"""Prerequisite checking helpers for MCP tools."""


def require_services(
    state, *, elevation: bool = False, geocoding: bool = False, model: bool = False,
    geolocation: bool = False,
) -> None:
    """Raise ValueError with a descriptive message if a required service has no credentials.

    Usage in a tool:
        try:
            require_services(state, elevation=True)
        except ValueError as e:
            return f"Error: {e}"
    """
    if elevation and not state.elevation.is_configured:
        raise ValueError(
            "Elevation lookups need GOOGLE_MAPS_API_KEY to be set."
        )
    if geocoding and not state.geocoder.is_configured:
        raise ValueError(
            "Address lookups need KAKAO_REST_API_KEY to be set."
        )
    if model and not state.model.is_configured:
        raise ValueError(
            "Course ranking needs GEMINI_API_KEY to be set."
        )
    if geolocation and not (state.geolocator and state.geolocator.api_key):
        raise ValueError(
            "Geolocation needs GOOGLE_MAPS_API_KEY to be set."
        )
