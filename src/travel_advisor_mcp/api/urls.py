"""Endpoint construction for the Travel Advisor and weather APIs."""

from urllib.parse import urlencode

from travel_advisor_mcp.models import QueryType, query_type_value

PLACES_HOST = "travel-advisor.p.rapidapi.com"
WEATHER_HOST = "community-open-weather-map.p.rapidapi.com"


def _locale_query(currency: str, units: str, lang: str) -> str:
    return urlencode({"currency": currency, "units": units, "lang": lang})


def build_boundary_url(query_type: QueryType | str, host: str = PLACES_HOST) -> str:
    """URL of the GET list-in-boundary endpoint for restaurants and attractions."""
    return f"https://{host}/{query_type_value(query_type)}/list-in-boundary"


def build_hotels_list_url(
    host: str = PLACES_HOST, currency: str = "USD", units: str = "km", lang: str = "en_US"
) -> str:
    return f"https://{host}/hotels/v2/list?{_locale_query(currency, units, lang)}"


def build_geo_list_url(
    query_type: QueryType | str,
    host: str = PLACES_HOST,
    currency: str = "USD",
    units: str = "km",
    lang: str = "en_US",
) -> str:
    """URL for listing places of a type within a location's geoId.

    Hotels share the v2 list endpoint; other types use ``/{type}/list``.
    """
    type_value = query_type_value(query_type)
    if type_value == QueryType.HOTELS.value:
        return build_hotels_list_url(host, currency, units, lang)
    return f"https://{host}/{type_value}/list?{_locale_query(currency, units, lang)}"


def build_search_url(
    host: str = PLACES_HOST, currency: str = "USD", units: str = "km", lang: str = "en_US"
) -> str:
    return f"https://{host}/locations/v2/search?{_locale_query(currency, units, lang)}"


def build_weather_url(host: str = WEATHER_HOST) -> str:
    return f"https://{host}/find"
