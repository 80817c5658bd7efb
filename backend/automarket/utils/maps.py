# backend/automarket/utils/maps.py
"""
Google Maps URL parser.

Extracts (latitude, longitude) from the URL formats people paste:
- https://maps.google.com/?q=24.7136,46.6753
- https://www.google.com/maps/place/Name/@24.7136,46.6753,17z
- https://www.google.com/maps/@24.7136,46.6753,15z
- ...?ll=24.7136,46.6753
- embedded data: ...!3d24.7136!4d46.6753
Short links (goo.gl, maps.app.goo.gl, bit.ly) are expanded by following
redirects first.
"""

import logging
import re
from typing import Optional

import httpx
from fastapi import Request

logger = logging.getLogger(__name__)

SHORT_LINK_HOSTS = ("goo.gl", "maps.app.goo.gl", "bit.ly")
MAX_REDIRECTS = 5

_NUM = r"(-?\d+\.?\d*)"

PATTERNS = [
    re.compile(rf"[?&]q={_NUM},{_NUM}"),
    re.compile(rf"@{_NUM},{_NUM}(?:,\d+\.?\d*)?z?"),
    re.compile(rf"/place/[^/]+/@{_NUM},{_NUM}"),
    re.compile(rf"[?&]ll={_NUM},{_NUM}"),
    re.compile(rf"!3d{_NUM}!4d{_NUM}"),
]


def is_short_link(url: str) -> bool:
    return any(host in url for host in SHORT_LINK_HOSTS)


def expand_short_url(url: str, client: Optional[httpx.Client] = None, timeout: float = 5.0) -> str:
    """Follow redirects of a short link; returns the original URL on failure."""
    owns_client = client is None
    client = client or build_http_client(timeout)
    try:
        resp = client.head(url, follow_redirects=True)
        final_url = str(resp.url)
        logger.info(f"Expanded maps URL: {final_url}")
        return final_url
    except httpx.HTTPError as e:
        logger.warning(f"Failed to expand short URL {url}: {e}")
        return url
    finally:
        if owns_client:
            client.close()


def parse_google_maps_url(
    url: Optional[str],
    client: Optional[httpx.Client] = None,
    timeout: float = 5.0,
) -> Optional[tuple[float, float]]:
    """Return (latitude, longitude) or None when no known pattern matches."""
    if not url:
        return None

    final_url = expand_short_url(url, client, timeout) if is_short_link(url) else url

    for pattern in PATTERNS:
        match = pattern.search(final_url)
        if match:
            return float(match.group(1)), float(match.group(2))

    return None


def is_valid_coordinates(latitude, longitude) -> bool:
    if isinstance(latitude, bool) or isinstance(longitude, bool):
        return False
    if not isinstance(latitude, (int, float)) or not isinstance(longitude, (int, float)):
        return False
    # NaN fails both comparisons
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


def build_http_client(timeout: float = 5.0) -> httpx.Client:
    return httpx.Client(
        follow_redirects=True,
        max_redirects=MAX_REDIRECTS,
        timeout=timeout,
    )


# Dependency for FastAPI: shared client built in the lifespan
def get_http_client(request: Request) -> httpx.Client:
    return request.app.state.http
