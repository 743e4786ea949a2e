"""
Workshop-to-request matching.

Linear scan over open requests with the haversine distance; no spatial index.
"""

from .request_finder import find_available_requests

__all__ = [
    "find_available_requests",
]
