"""Client for the FastEdge REST API."""

from .enhanced import EnhancedApp, HydratedApp
from .fastedge import AppsAPI, BinariesAPI, FastEdgeClient, SecretsAPI
from .results import Found, LookupResult, NotFound

__all__ = [
    "AppsAPI",
    "BinariesAPI",
    "EnhancedApp",
    "FastEdgeClient",
    "Found",
    "HydratedApp",
    "LookupResult",
    "NotFound",
    "SecretsAPI",
]
