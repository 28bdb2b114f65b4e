import logging
import time

import requests

from config import CONFIG
from models import Coordinate

logger = logging.getLogger(__name__)


def _valid_coordinate(lat, lon) -> Coordinate | None:
    """Coordinate from raw values, or None if they are missing, non-numeric or out of range."""
    try:
        lat = float(lat)
        lon = float(lon)
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed location: %r, %r", lat, lon)
        return None
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        logger.warning("Ignoring out-of-range location: %s, %s", lat, lon)
        return None
    return Coordinate(lat=lat, lon=lon)


def coordinate_from_geolocation(loc) -> Coordinate | None:
    """Read the fix returned by ``streamlit_geolocation()``.

    The component returns a dict whose values stay None until the user
    grants access; some browsers nest them under ``coords``.
    """
    if not loc:
        return None
    if loc.get('latitude') is None and isinstance(loc.get('coords'), dict):
        loc = loc['coords']
    if loc.get('latitude') is None or loc.get('longitude') is None:
        return None
    return _valid_coordinate(loc['latitude'], loc['longitude'])


def reverse_geocode(coordinate: Coordinate, max_retries=2) -> dict:
    """Display label for a coordinate. Falls back to the raw numbers."""
    lat, lon = coordinate.lat, coordinate.lon
    for attempt in range(max_retries):
        try:
            params = {
                'lat': lat,
                'lon': lon,
                'format': 'json',
                'addressdetails': 1
            }
            headers = {'User-Agent': CONFIG["USER_AGENT"]}

            response = requests.get(CONFIG["REVERSE_GEOCODING_API"], params=params, headers=headers, timeout=10)

            if response.status_code == 200:
                data = response.json()

                if data and 'address' in data:
                    address = data['address']
                    return {
                        'city': address.get('city') or address.get('town') or address.get('village', 'Unknown'),
                        'country': address.get('country', 'Unknown'),
                        'full_address': data.get('display_name', f"{lat}, {lon}"),
                        'source': 'Browser GPS'
                    }

            if response.status_code == 429 and attempt < max_retries - 1:
                time.sleep(2)
                continue

        except requests.RequestException as e:
            logger.warning("Reverse geocode failed: %s", e)
            if attempt < max_retries - 1:
                time.sleep(1)
                continue

    return {
        'city': f"Location ({lat:.2f}, {lon:.2f})",
        'country': 'Unknown',
        'full_address': f"{lat:.4f}, {lon:.4f}",
        'source': 'GPS (No address found)'
    }


def get_ip_location() -> Coordinate | None:
    """Approximate location from the IP address. None if both services fail."""
    try:
        response = requests.get(CONFIG["IPAPI_URL"], timeout=5)
        data = response.json()

        if isinstance(data, dict) and 'error' not in data:
            coord = _valid_coordinate(data.get('latitude'), data.get('longitude'))
            if coord:
                return coord
    except (requests.RequestException, ValueError) as e:
        logger.warning("ipapi.co lookup failed: %s", e)

    try:
        response = requests.get(CONFIG["IPAPI_BACKUP"], timeout=5)
        data = response.json()

        if isinstance(data, dict) and data.get('status') == 'success':
            return _valid_coordinate(data.get('lat'), data.get('lon'))
    except (requests.RequestException, ValueError) as e:
        logger.warning("ip-api.com lookup failed: %s", e)

    return None
