import httpx
import pytest

from marketplace.errors import ExternalServiceError
from marketplace.services.geocoding import MapboxGeocoder


def test_locate_returns_first_feature(geocoder):
    assert geocoder.locate("Goa", "India") == (73.8278, 15.4909)


def test_locate_without_match_fails(geocoder):
    with pytest.raises(ExternalServiceError):
        geocoder.locate("", "India")


def test_request_carries_token_and_limit():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"features": []})

    geocoder = MapboxGeocoder("secret-token", client=httpx.Client(transport=httpx.MockTransport(handler)))
    assert geocoder.forward_geocode("Paris, France", limit=1) == []
    assert seen["params"] == {"access_token": "secret-token", "limit": "1"}


def test_http_error_is_external_service_error():
    geocoder = MapboxGeocoder(
        "token",
        client=httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(503))),
    )
    with pytest.raises(ExternalServiceError):
        geocoder.forward_geocode("Paris, France")


def test_missing_token_is_external_service_error():
    with pytest.raises(ExternalServiceError):
        MapboxGeocoder(None).forward_geocode("Paris, France")
