"""Great-circle distance helpers used for shop proximity in dispatch views."""

import math

EARTH_RADIUS_KM = 6371.0


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in kilometres between two coordinates.

    NaN inputs propagate to a NaN result; callers guard missing coordinates.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = math.sin(d_lat / 2) ** 2 + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def order_distance_km(order, latitude: float, longitude: float) -> float | None:
    """Distance from a worker position to the order's shop, if the shop is located."""
    if order.shop_latitude is None or order.shop_longitude is None:
        return None
    return distance_km(latitude, longitude, order.shop_latitude, order.shop_longitude)
