"""
Adapters package for the Mapping service.
"""

from .tomtom_client import TomTomClient, encode_segment

__all__ = ["TomTomClient", "encode_segment"]
