"""
City data service layer: fan-out to the upstream domains through the
fallback fetcher.
"""

from .service import CityDataService

__all__ = ["CityDataService"]
