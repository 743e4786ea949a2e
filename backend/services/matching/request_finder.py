"""
Find open repair requests near a workshop.

Each returned request carries a ``distance`` attribute (km) so serializers
can expose it next to the request data.
"""

import logging
from typing import List, Optional

from django.conf import settings

from common.utils import calculate_distance
from repairs.models import RepairRequest
from services.repair_management.exceptions import InvalidInputError, NotFoundError
from services.repair_management.request_lifecycle import open_requests

logger = logging.getLogger(__name__)


def find_available_requests(
    workshop,
    latitude=None,
    longitude=None,
    radius_km: Optional[float] = None,
) -> List[RepairRequest]:
    """
    Open, unexpired requests within ``radius_km`` that this workshop has not
    bid on yet, nearest first.

    Args:
        workshop: Workshop instance doing the search
        latitude: Search centre latitude (defaults to the workshop's)
        longitude: Search centre longitude (defaults to the workshop's)
        radius_km: Search radius in km (defaults to DEFAULT_SEARCH_RADIUS_KM)

    Returns:
        List of RepairRequest instances sorted by distance (closest first)
    """
    if workshop is None:
        raise NotFoundError("Workshop not found")

    radius_km = settings.DEFAULT_SEARCH_RADIUS_KM if radius_km is None else float(radius_km)
    if radius_km <= 0:
        raise InvalidInputError("Radius must be greater than zero")

    search_lat = workshop.latitude if latitude is None else latitude
    search_lon = workshop.longitude if longitude is None else longitude

    candidates = (
        open_requests()
        # Any offer from this workshop, whatever its status, hides the request
        .exclude(offers__workshop=workshop)
        .select_related("vehicle", "report", "customer")
    )

    matches: List[RepairRequest] = []
    for repair_request in candidates:
        distance = calculate_distance(
            search_lat,
            search_lon,
            repair_request.latitude,
            repair_request.longitude,
        )
        # Only keep requests inside the search radius
        if distance <= radius_km:
            repair_request.distance = distance
            matches.append(repair_request)

    # Sort closest -> farthest
    matches.sort(key=lambda r: r.distance)

    logger.info(
        "Found %d available request(s) for workshop %s (radius=%skm)",
        len(matches), workshop.id, radius_km,
    )
    return matches
