"""Optional network collaborators: historical weather and static basemaps."""

from route_animator.services.tiles import MapboxStaticClient, calc_center_zoom, lon_lat_to_tile
from route_animator.services.weather import OpenMeteoWeatherClient, WeatherReading

__all__ = [
    "MapboxStaticClient",
    "OpenMeteoWeatherClient",
    "WeatherReading",
    "calc_center_zoom",
    "lon_lat_to_tile",
]
