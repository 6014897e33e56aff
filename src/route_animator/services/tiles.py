"""Static basemap images from the Mapbox Static Images API."""

from __future__ import annotations

import io
import logging
import math
from collections.abc import Sequence

import requests
from PIL import Image, UnidentifiedImageError

from route_animator.timeline.models import Sample

_logger = logging.getLogger(__name__)

TILE_SIZE = 512
MAX_ZOOM = 16
MAX_IMAGE_SIDE = 1280
MIN_IMAGE_SIDE = 200
_FIT_PADDING = 1.1


def lon_lat_to_tile(lon: float, lat: float, zoom: int) -> tuple[float, float]:
    """Fractional Web-Mercator tile coordinates of (*lon*, *lat*) at *zoom*."""
    rad = math.radians(lat)
    x = (lon + 180.0) / 360.0
    y = (1.0 - math.log(math.tan(rad) + 1.0 / math.cos(rad)) / math.pi) / 2.0
    n = 1 << zoom
    return x * n, y * n


def calc_center_zoom(samples: Sequence[Sample], width: int, height: int) -> tuple[float, float, int]:
    """``(center_lon, center_lat, zoom)``: the largest zoom that fits the route.

    The route's bounding box, padded by 10 %, must fit inside
    ``width × height`` at :data:`TILE_SIZE` pixels per tile.
    """
    lons = [s.x for s in samples]
    lats = [s.y for s in samples]
    min_lon, max_lon = min(lons), max(lons)
    min_lat, max_lat = min(lats), max(lats)
    center_lon = (min_lon + max_lon) / 2
    center_lat = (min_lat + max_lat) / 2
    for z in range(MAX_ZOOM, -1, -1):
        tlx, tly = lon_lat_to_tile(min_lon, max_lat, z)
        brx, bry = lon_lat_to_tile(max_lon, min_lat, z)
        if (
            abs(brx - tlx) * TILE_SIZE <= width / _FIT_PADDING
            and abs(bry - tly) * TILE_SIZE <= height / _FIT_PADDING
        ):
            return center_lon, center_lat, z
    return center_lon, center_lat, 0


def request_size(width: int, height: int) -> tuple[int, int]:
    """Scale the canvas down to the API's maximum side, keeping aspect."""
    scale = min(MAX_IMAGE_SIDE / width, MAX_IMAGE_SIDE / height, 1.0)
    return max(MIN_IMAGE_SIDE, round(width * scale)), max(MIN_IMAGE_SIDE, round(height * scale))


class MapboxStaticClient:
    """Fetches an outdoors-style basemap framing a route.

    Args:
        token: Mapbox access token.  Without one :meth:`fetch` returns ``None``.
        session: ``requests`` session; injected in tests.
        timeout: Request timeout in seconds.
    """

    BASE_URL = "https://api.mapbox.com/styles/v1/mapbox/outdoors-v12/static"

    def __init__(
        self, token: str = "", session: requests.Session | None = None, timeout: float = 10.0
    ) -> None:
        self._token = token
        self._session = session or requests.Session()
        self._timeout = timeout

    def url_for(self, samples: Sequence[Sample], width: int, height: int) -> str:
        lon, lat, zoom = calc_center_zoom(samples, width, height)
        w, h = request_size(width, height)
        return f"{self.BASE_URL}/{lon},{lat},{zoom},0,0/{w}x{h}"

    def fetch(self, samples: Sequence[Sample], width: int, height: int) -> Image.Image | None:
        """Basemap for *samples* on a ``width × height`` canvas, or ``None``."""
        if not self._token or not samples:
            return None
        params = {"access_token": self._token, "attribution": "false", "logo": "false"}
        try:
            response = self._session.get(
                self.url_for(samples, width, height), params=params, timeout=self._timeout
            )
            response.raise_for_status()
            image = Image.open(io.BytesIO(response.content))
            image.load()
        except (requests.RequestException, UnidentifiedImageError, OSError) as exc:
            _logger.warning("Map image fetch failed: %s", exc)
            return None
        return image.convert("RGB")
