"""
Tests for the Google Maps URL parser.
"""

import httpx
import pytest

from automarket.utils.maps import (
    expand_short_url,
    is_short_link,
    is_valid_coordinates,
    parse_google_maps_url,
)


class TestParseGoogleMapsUrl:

    @pytest.mark.parametrize("url, expected", [
        ("https://maps.google.com/?q=24.7136,46.6753", (24.7136, 46.6753)),
        ("https://www.google.com/maps?hl=en&q=24.7136,46.6753", (24.7136, 46.6753)),
        ("https://www.google.com/maps/@24.7136,46.6753,15z", (24.7136, 46.6753)),
        ("https://www.google.com/maps/place/Some+Garage/@24.7136,46.6753,17z", (24.7136, 46.6753)),
        ("https://maps.google.com/maps?ll=-33.8688,151.2093&z=10", (-33.8688, 151.2093)),
        ("https://www.google.com/maps/data=!4m5!3m4!1s0x0:0x0!8m2!3d24.7136!4d46.6753", (24.7136, 46.6753)),
    ])
    def test_known_formats(self, url, expected):
        assert parse_google_maps_url(url) == expected

    def test_q_pattern_wins_over_at(self):
        url = "https://www.google.com/maps/@10.0,20.0,15z?q=24.5,46.5"
        assert parse_google_maps_url(url) == (24.5, 46.5)

    @pytest.mark.parametrize("url", [None, "", "https://example.com/no/coords", "not a url"])
    def test_no_match(self, url):
        assert parse_google_maps_url(url) is None


class TestShortLinks:

    def test_detects_short_hosts(self):
        assert is_short_link("https://maps.app.goo.gl/abc123")
        assert is_short_link("https://goo.gl/maps/xyz")
        assert is_short_link("https://bit.ly/3abc")
        assert not is_short_link("https://www.google.com/maps/@1,2,3z")

    def test_short_link_expanded_by_following_redirects(self):
        target = "https://www.google.com/maps/place/Garage/@24.7136,46.6753,17z"

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "maps.app.goo.gl":
                return httpx.Response(302, headers={"Location": target})
            return httpx.Response(200)

        with httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True) as client:
            assert parse_google_maps_url("https://maps.app.goo.gl/abc123", client) == (24.7136, 46.6753)

    def test_expansion_failure_keeps_original_url(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("network down", request=request)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            url = "https://goo.gl/maps/abc"
            assert expand_short_url(url, client) == url
            assert parse_google_maps_url(url, client) is None

    def test_failed_short_link_still_parses_embedded_coords(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("network down", request=request)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            url = "https://goo.gl/maps?q=24.1,46.2"
            assert parse_google_maps_url(url, client) == (24.1, 46.2)


class TestIsValidCoordinates:

    @pytest.mark.parametrize("lat, lng", [(0, 0), (90, 180), (-90, -180), (24.7, 46.6)])
    def test_valid(self, lat, lng):
        assert is_valid_coordinates(lat, lng)

    @pytest.mark.parametrize("lat, lng", [
        (91, 0), (0, 181), (-90.1, 0), ("24", "46"), (None, 1), (True, 1), (float("nan"), 0),
    ])
    def test_invalid(self, lat, lng):
        assert not is_valid_coordinates(lat, lng)
