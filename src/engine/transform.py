"""
Coordinate Transformation Utilities relying on pyproj.
The one local reprojection MapCompare performs: Korea TM (EPSG:5179) to WGS84 (EPSG:4326).
Used only when Tmap's transcoord endpoint cannot convert a noorLon/noorLat pair.
"""

from typing import Tuple
from pyproj import Transformer

from shared.constants import EPSG_KOREA_TM, EPSG_WGS84

# Initialize once to avoid overhead
# always_xy=True forces input/output to be (x, y) / (lon, lat) rather than (lat, lon)
TRANSFORM_5179_TO_4326 = Transformer.from_crs(EPSG_KOREA_TM, EPSG_WGS84, always_xy=True)


def transform_5179_to_4326(x: float, y: float) -> Tuple[float, float]:
    """
    Transform EPSG:5179 (x, y) to EPSG:4326.
    Returns (lon, lat), matching the Coordinate field order.
    """
    lon, lat = TRANSFORM_5179_TO_4326.transform(xx=x, yy=y)
    return lon, lat
