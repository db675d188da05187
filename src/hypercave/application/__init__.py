from .cave_session import CaveSession, LoadResult, LookupResult
from .service_factory import CaveServices, build_services

__all__ = [
    "CaveSession",
    "LoadResult",
    "LookupResult",
    "CaveServices",
    "build_services",
]
