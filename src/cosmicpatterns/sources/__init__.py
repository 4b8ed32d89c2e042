"""Activity and cosmic context sources."""

from cosmicpatterns.sources.base import ActivitySource, CosmicContextProvider
from cosmicpatterns.sources.json_files import JsonActivitySource, JsonCosmicContextProvider

__all__ = [
    "ActivitySource",
    "CosmicContextProvider",
    "JsonActivitySource",
    "JsonCosmicContextProvider",
]
